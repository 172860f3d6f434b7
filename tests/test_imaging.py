import unittest
from io import BytesIO

from PIL import Image as PILImage

from imaging import MetadataUnavailableError, count_predominant_colors, extract_metadata


def encode_png(pil_image):
    buffer = BytesIO()
    pil_image.save(buffer, format="PNG")
    return buffer.getvalue()


def striped_image(width, height, colors):
    """Vertical stripes of equal width, one per colour."""
    pil_image = PILImage.new("RGB", (width, height))
    stripe_width = width // len(colors)
    for index, color in enumerate(colors):
        pil_image.paste(color, (index * stripe_width, 0, (index + 1) * stripe_width, height))
    return pil_image


class TestExtractMetadata(unittest.TestCase):
    def test_reads_dimensions_and_file_size(self):
        png_bytes = encode_png(PILImage.new("RGB", (120, 80), (200, 30, 30)))
        metadata = extract_metadata(png_bytes)

        self.assertEqual((metadata.width, metadata.height), (120, 80))
        self.assertAlmostEqual(metadata.file_size_kb, len(png_bytes) / 1024)
        self.assertEqual(metadata.color_count, 1)

    def test_accepts_streams(self):
        png_bytes = encode_png(PILImage.new("RGB", (10, 20), (0, 0, 0)))
        metadata = extract_metadata(BytesIO(png_bytes))
        self.assertEqual((metadata.width, metadata.height), (10, 20))

    def test_counts_stripes(self):
        colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
        self.assertEqual(count_predominant_colors(striped_image(200, 50, colors)), 4)

    def test_rare_colors_are_ignored(self):
        pil_image = PILImage.new("RGB", (100, 100), (255, 255, 255))
        pil_image.putpixel((0, 0), (0, 0, 0))
        self.assertEqual(count_predominant_colors(pil_image), 1)

    def test_garbage_raises(self):
        with self.assertRaises(MetadataUnavailableError):
            extract_metadata(b"definitely not an image")

    def test_empty_raises(self):
        with self.assertRaises(MetadataUnavailableError):
            extract_metadata(b"")


if __name__ == "__main__":
    unittest.main()
