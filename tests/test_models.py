import unittest
from models import ImageMetadata, Recommendation, ScoreResult, SizeClass, SizeEstimate


class TestImageMetadataValidation(unittest.TestCase):
    def test_valid_metadata_has_no_errors(self):
        metadata = ImageMetadata.from_dict({
            "width": 1920,
            "height": 1080,
            "file_size_kb": 850.5,
            "color_count": 4,
        })
        self.assertEqual(metadata.validate(), [])
        self.assertEqual(metadata.pixel_area, 1920 * 1080)

    def test_numeric_strings_are_coerced(self):
        metadata = ImageMetadata.from_dict({
            "width": "800",
            "height": "600.0",
            "file_size_kb": "120.5",
            "color_count": "3",
        })
        self.assertEqual(metadata, ImageMetadata(width=800, height=600, file_size_kb=120.5, color_count=3))

    def test_invalid_fields_are_reported(self):
        metadata = ImageMetadata.from_dict({
            "width": "wide",
            "height": -4,
            "file_size_kb": -1,
            "color_count": -2,
        })
        errors = metadata.validate()
        self.assertIn("width must be > 0.", errors)
        self.assertIn("height must be > 0.", errors)
        self.assertIn("file_size_kb must be >= 0.", errors)
        self.assertIn("color_count must be >= 0.", errors)

    def test_values_too_large_for_storage_are_reported(self):
        metadata = ImageMetadata(width=10**20, height=2**31, file_size_kb=float("inf"), color_count=2**31 - 1)
        errors = metadata.validate()
        self.assertIn("width must be <= 2147483647.", errors)
        self.assertIn("height must be <= 2147483647.", errors)
        self.assertIn("file_size_kb must be a finite number.", errors)
        self.assertFalse(any(e.startswith("color_count") for e in errors))


class TestResultSerialization(unittest.TestCase):
    def test_score_result_to_dict(self):
        result = ScoreResult(
            material="metal",
            size=SizeClass.LARGE,
            impact_score=7.9,
            emissions_kg=279,
            recommendations=[Recommendation("Disposal", "Eco-friendly metal disposal", "text", 68)],
        )
        body = result.to_dict()
        self.assertEqual(body["size"], "large")
        self.assertEqual(body["recommendations"][0]["impact_points"], 68)
        self.assertEqual(
            set(body),
            {"material", "size", "impact_score", "emissions_kg", "recommendations"},
        )

    def test_size_estimate_dimensions(self):
        estimate = SizeEstimate(size=SizeClass.MEDIUM)
        self.assertEqual(estimate.dimensions(), {"width": 0, "height": 0})


if __name__ == "__main__":
    unittest.main()
