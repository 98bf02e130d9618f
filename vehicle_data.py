from typing import List, Iterable
import numpy as np

from vehicle_position import VehiclePosition

'''
Reader and writer for the packed vehicle position file. Each record is
    int32 vehicle id
    registration, UTF-8, terminated by a zero byte
    float32 latitude
    float32 longitude
    uint64 recorded time (UTC), not kept
all little endian, back to back until the end of the file.
'''

ID_DTYPE = np.dtype('<i4')
COORDINATE_DTYPE = np.dtype('<f4')
RECORDED_TIME_DTYPE = np.dtype('<u8')

# Bytes after the registration terminator
TRAILER_SIZE = 2 * COORDINATE_DTYPE.itemsize + RECORDED_TIME_DTYPE.itemsize


class VehicleDataError(ValueError):
    def __init__(self, message, offset=None):
        if offset is not None:
            message = f"{message} (record at byte {offset})"
        super().__init__(message)
        self.offset = offset


def parse_vehicle_positions(data: bytes) -> List[VehiclePosition]:
    positions = []
    data_length = len(data)
    offset = 0
    while offset < data_length:
        record_start = offset
        if data_length - offset < ID_DTYPE.itemsize:
            raise VehicleDataError("Truncated vehicle id", record_start)
        vehicle_id = int(np.frombuffer(data, dtype=ID_DTYPE, count=1, offset=offset)[0])
        offset += ID_DTYPE.itemsize

        terminator = data.find(b'\0', offset)
        if terminator < 0:
            raise VehicleDataError("Registration is not terminated", record_start)
        try:
            registration = data[offset:terminator].decode('utf-8')
        except UnicodeDecodeError as e:
            raise VehicleDataError(f"Registration is not valid UTF-8: {e}", record_start) from e
        offset = terminator + 1

        if data_length - offset < TRAILER_SIZE:
            raise VehicleDataError("Truncated coordinates", record_start)
        latitude, longitude = np.frombuffer(data, dtype=COORDINATE_DTYPE, count=2, offset=offset)
        offset += TRAILER_SIZE  # recorded time is skipped

        position = VehiclePosition(vehicle_id, registration, float(latitude), float(longitude))
        if not position.is_finite():
            raise VehicleDataError(f"Vehicle {vehicle_id} has non-finite coordinates", record_start)
        positions.append(position)
    return positions


def load_vehicle_positions(file_path) -> List[VehiclePosition]:
    with open(file_path, 'rb') as f:
        data = f.read()
    return parse_vehicle_positions(data)


def _check_range(value, dtype, message):
    limits = np.iinfo(dtype)
    if not limits.min <= value <= limits.max:
        raise VehicleDataError(f"{message} {value} does not fit in {dtype.name} "
                               f"[{limits.min}, {limits.max}]")


def encode_vehicle_position(position: VehiclePosition, recorded_time_utc: int = 0) -> bytes:
    _check_range(position.vehicle_id, ID_DTYPE, "Vehicle id")
    _check_range(recorded_time_utc, RECORDED_TIME_DTYPE, "Recorded time")
    registration = position.registration.encode('utf-8')
    if b'\0' in registration:
        raise VehicleDataError(f"Registration of vehicle {position.vehicle_id} contains a zero byte")
    return b''.join([
        np.array(position.vehicle_id, dtype=ID_DTYPE).tobytes(),
        registration,
        b'\0',
        np.array([position.latitude, position.longitude], dtype=COORDINATE_DTYPE).tobytes(),
        np.array(recorded_time_utc, dtype=RECORDED_TIME_DTYPE).tobytes(),
    ])


def write_vehicle_positions(file_path, positions: Iterable[VehiclePosition], recorded_time_utc: int = 0):
    with open(file_path, 'wb') as f:
        for position in positions:
            f.write(encode_vehicle_position(position, recorded_time_utc))
