import os
import tempfile
import unittest
import numpy as np
from vehicle_data import (load_vehicle_positions, parse_vehicle_positions, write_vehicle_positions,
                          encode_vehicle_position, VehicleDataError)
from vehicle_position import VehiclePosition


def float32(value):
    return float(np.float32(value))


class TestVehicleData(unittest.TestCase):
    def setUp(self):
        self.positions = [
            VehiclePosition(1, "AAA111", float32(34.5), float32(-102.1)),
            VehiclePosition(2, "BBB222", float32(32.3), float32(-99.1)),
            VehiclePosition(3, "", float32(0.0), float32(0.0)),
            VehiclePosition(-4, "ÆØÅ 123", float32(-89.99), float32(179.99)),
        ]
        self.directory = tempfile.TemporaryDirectory()
        self.file_path = os.path.join(self.directory.name, "VehiclePositions.dat")

    def tearDown(self):
        self.directory.cleanup()

    def test_written_file_loads_back(self):
        write_vehicle_positions(self.file_path, self.positions, recorded_time_utc=1700000000)
        self.assertEqual(load_vehicle_positions(self.file_path), self.positions)

    def test_record_layout(self):
        record = encode_vehicle_position(VehiclePosition(258, "AB", 1.5, -2.0), recorded_time_utc=7)
        self.assertEqual(record[:4], b'\x02\x01\x00\x00')
        self.assertEqual(record[4:7], b'AB\0')
        self.assertEqual(np.frombuffer(record, dtype='<f4', count=2, offset=7).tolist(), [1.5, -2.0])
        self.assertEqual(np.frombuffer(record, dtype='<u8', count=1, offset=15)[0], 7)
        self.assertEqual(len(record), 23)

    def test_empty_file(self):
        write_vehicle_positions(self.file_path, [])
        self.assertEqual(load_vehicle_positions(self.file_path), [])

    def test_missing_file(self):
        with self.assertRaises(OSError):
            load_vehicle_positions(os.path.join(self.directory.name, "missing.dat"))

    def test_truncated_id(self):
        record = encode_vehicle_position(self.positions[0])
        data = record + b"\x01\x00"
        with self.assertRaises(VehicleDataError) as context:
            parse_vehicle_positions(data)
        self.assertEqual(context.exception.offset, len(record))

    def test_unterminated_registration(self):
        data = encode_vehicle_position(self.positions[0])[:7]
        with self.assertRaises(VehicleDataError):
            parse_vehicle_positions(data)

    def test_truncated_coordinates(self):
        data = encode_vehicle_position(self.positions[1])
        with self.assertRaises(VehicleDataError) as context:
            parse_vehicle_positions(data[:-1])
        self.assertEqual(context.exception.offset, 0)

    def test_non_finite_coordinates_rejected(self):
        data = encode_vehicle_position(VehiclePosition(9, "NAN", float('nan'), 1.0))
        with self.assertRaises(VehicleDataError):
            parse_vehicle_positions(data)

    def test_invalid_utf8_rejected(self):
        data = b'\x01\x00\x00\x00\xff\xfe\0' + bytes(16)
        with self.assertRaises(VehicleDataError):
            parse_vehicle_positions(data)

    def test_vehicle_id_outside_int32_rejected(self):
        for vehicle_id in [2 ** 31, -2 ** 31 - 1]:
            with self.assertRaises(VehicleDataError):
                encode_vehicle_position(VehiclePosition(vehicle_id, "BIG", 0.0, 0.0))
        for vehicle_id in [2 ** 31 - 1, -2 ** 31]:
            record = encode_vehicle_position(VehiclePosition(vehicle_id, "EDGE", 0.0, 0.0))
            self.assertEqual(parse_vehicle_positions(record)[0].vehicle_id, vehicle_id)

    def test_recorded_time_outside_uint64_rejected(self):
        for recorded_time_utc in [-1, 2 ** 64]:
            with self.assertRaises(VehicleDataError):
                encode_vehicle_position(self.positions[0], recorded_time_utc)
        record = encode_vehicle_position(self.positions[0], 2 ** 64 - 1)
        self.assertEqual(record[-8:], b'\xff' * 8)

    def test_registration_with_zero_byte_rejected(self):
        with self.assertRaises(VehicleDataError):
            encode_vehicle_position(VehiclePosition(1, "A\0B", 0.0, 0.0))


if __name__ == '__main__':
    unittest.main()
