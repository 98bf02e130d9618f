import sys
import argparse

from config import DATA_FILE, TARGETS, PIVOT, SEED
from function_profiler import FunctionProfiler
from kd_tree import KDTree, PIVOT_STRATEGIES
from vehicle_data import load_vehicle_positions

'''
Loads a vehicle position file, builds a kd-tree over it and prints the
nearest vehicle to each target, with the time spent in each phase.
'''

def run(data_file=DATA_FILE, targets=TARGETS, pivot=PIVOT, seed=SEED, profiler=None, out=None):
    if profiler is None:
        profiler = FunctionProfiler()
    if out is None:
        out = sys.stdout

    with profiler.timed("load"):
        vehicle_positions = load_vehicle_positions(data_file)
    print(f"Data loading time: {profiler.total('load'):.0f} ms ({len(vehicle_positions)} vehicles)", file=out)

    with profiler.timed("build"):
        kd_tree = KDTree.build(vehicle_positions, pivot=pivot, seed=seed)
    print(f"k-d tree build time: {profiler.total('build'):.0f} ms (depth {kd_tree.depth()})", file=out)

    results = []
    for (lat, lon) in targets:
        with profiler.timed("search"):
            nearest_vehicle = kd_tree.find_nearest(lat, lon)
        results.append(((lat, lon), nearest_vehicle))
        if nearest_vehicle is not None:
            print(f"Nearest vehicle to ({lat}, {lon}): {nearest_vehicle}", file=out)
        else:
            print(f"No vehicle near ({lat}, {lon}): no positions loaded", file=out)
    print(f"Total nearest search time: {profiler.total('search'):.0f} ms", file=out)
    return results


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Find the nearest vehicle to each target coordinate")
    parser.add_argument("data_file", nargs="?", default=DATA_FILE)
    parser.add_argument("--target", dest="targets", nargs=2, type=float, action="append",
                        metavar=("LAT", "LON"), help="query coordinate, may be repeated")
    parser.add_argument("--pivot", dest="pivot", choices=PIVOT_STRATEGIES, default=PIVOT)
    parser.add_argument("--seed", dest="seed", type=int, default=SEED)
    parser.add_argument("--plot-timings", dest="plot_timings", action="store_true",
                        help="show density plots of the load, build and search timings")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    targets = [tuple(target) for target in args.targets] if args.targets else TARGETS
    profiler = FunctionProfiler()
    try:
        run(args.data_file, targets, args.pivot, args.seed, profiler)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if args.plot_timings:
        profiler.plot_all("load", "build", "search")
    return 0


if __name__ == "__main__":
    sys.exit(main())
