import pytest

from menustudio.modules.ai.images import (
    calculate_dimensions,
    decode_data_url,
    extract_gateway_images,
    extract_gemini_image,
    parse_data_url,
    resolution_quality,
    sniff_image_type,
    to_data_url,
)


class TestDimensions:
    @pytest.mark.parametrize("ratio, resolution, expected", [
        ("1:1", "1K", (1024, 1024)),
        ("16:9", "2K", (2048, 1152)),
        ("9:16", "4K", (2304, 4096)),
        ("4:3", "1K", (1024, 768)),
        ("7:5", "8K", (1024, 1024)),
    ])
    def test_larger_side_is_base(self, ratio, resolution, expected):
        assert calculate_dimensions(ratio, resolution) == expected

    def test_quality_text(self):
        assert resolution_quality("4K") == "ultra high definition 4K quality"
        assert resolution_quality("1K") == "standard 1K quality"


class TestDataUrls:
    def test_parse(self):
        assert parse_data_url("data:image/png;base64,AAAA") == ("image/png", "AAAA")
        assert parse_data_url("https://cdn.example/a.png") is None

    def test_encode_decode(self):
        url = to_data_url(b"\x89PNG\r\n\x1a\nrest", "image/png")
        assert url.startswith("data:image/png;base64,")
        assert decode_data_url(url) == b"\x89PNG\r\n\x1a\nrest"

    def test_sniff(self):
        assert sniff_image_type(b"\x89PNG\r\n\x1a\n....") == "image/png"
        assert sniff_image_type(b"\xff\xd8\xff\xe0") == "image/jpeg"
        assert sniff_image_type(b"GIF89a") is None


class TestExtractImages:
    def test_images_array(self):
        message = {"images": [{"image_url": {"url": "data:image/png;base64,A"}}, {"url": "https://x/b.png"}, {}]}
        assert extract_gateway_images(message) == ["data:image/png;base64,A", "https://x/b.png"]

    def test_inline_content_fallback(self):
        message = {"content": 'Here: data:image/jpeg;base64,QUJD and "data:image/png;base64,REVG"'}
        assert extract_gateway_images(message) == ["data:image/jpeg;base64,QUJD", "data:image/png;base64,REVG"]

    def test_nothing(self):
        assert extract_gateway_images(None) == []
        assert extract_gateway_images({"content": [{"type": "text"}]}) == []

    def test_gemini_inline_data(self):
        data = {"candidates": [{"content": {"parts": [
            {"text": "done"},
            {"inlineData": {"mimeType": "image/png", "data": "QUJD"}},
        ]}}]}
        assert extract_gemini_image(data) == "data:image/png;base64,QUJD"
        assert extract_gemini_image({"candidates": []}) is None
