DATA_FILE = "VehiclePositions.dat"

# Default query coordinates, (latitude, longitude)
TARGETS = [
    (34.544909, -102.10084),
    (32.345544, -99.123124),
    (33.234235, -100.21412),
    (35.195739, -95.348899),
    (31.895839, -97.789573),
    (32.895839, -101.78957),
    (34.115839, -100.22573),
    (32.335839, -99.992232),
    (33.535339, -94.792232),
    (32.234235, -100.22222),
]

PIVOT = "random"
SEED = 42
