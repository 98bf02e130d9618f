from typing import NamedTuple
import numpy as np

LATITUDE_AXIS = 0
LONGITUDE_AXIS = 1

class VehiclePosition(NamedTuple):
    vehicle_id: int
    registration: str
    latitude: float
    longitude: float

    @property
    def point(self) -> np.ndarray:
        return np.array([self.latitude, self.longitude], dtype=np.float64)

    def is_finite(self) -> bool:
        return bool(np.isfinite(self.latitude) and np.isfinite(self.longitude))

    def __str__(self):
        return f"ID {self.vehicle_id}, Reg {self.registration}, at ({self.latitude}, {self.longitude})"
