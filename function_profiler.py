import time
import functools
from contextlib import contextmanager
import seaborn as sns
import matplotlib.pyplot as plt
import numpy as np

class FunctionProfiler:
    def __init__(self):
        self.profiles = {}

    def record(self, name, elapsed_time):
        if name not in self.profiles:
            self.profiles[name] = []
        self.profiles[name].append(elapsed_time)

    def profile(self, name):
        def decorator(func):
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                result = func(*args, **kwargs)
                self.record(name, time.perf_counter() - start_time)
                return result

            return wrapper

        return decorator

    @contextmanager
    def timed(self, name):
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, time.perf_counter() - start_time)

    def total(self, name) -> float:
        # Milliseconds
        return sum(self.profiles.get(name, [])) * 1000.0

    def summary(self):
        return {name: self.total(name) for name in self.profiles}

    def plot_all(self, *names):
        '''
        One kernel density curve per phase, in milliseconds. Phases timed
        only once have no spread and are marked with a vertical line instead.
        '''
        figure = plt.figure(figsize=(8, 6))
        plt.title("Phase timings")
        plt.xlabel("Elapsed time (ms)")
        plt.ylabel("Density")

        for name in names:
            if name not in self.profiles:
                print(f"No timings recorded for '{name}'")
                continue
            data = np.array(self.profiles[name]) * 1000.0
            if len(data) > 1:
                sns.kdeplot(data, fill=True, label=name, warn_singular=False)
            else:
                plt.axvline(data[0], linestyle='--', label=name)

        plt.legend()
        plt.show()
        return figure
