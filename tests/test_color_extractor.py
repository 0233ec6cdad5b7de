import io

from PIL import Image

from smart_quote.color_extractor import extract_dominant_color, to_data_url


def _png(color, size=(20, 20), mode="RGBA") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_solid_image_gives_its_color():
    assert extract_dominant_color(_png((255, 0, 0, 255))) == "#ff0000"
    assert extract_dominant_color(_png((16, 32, 48), mode="RGB")) == "#102030"


def test_transparent_pixels_are_ignored():
    im = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    # Sampled pixels are every 10th in row-major order: the first column here.
    for y in range(10):
        im.putpixel((0, y), (0, 128, 255, 255))
    buf = io.BytesIO()
    im.save(buf, format="PNG")

    assert extract_dominant_color(buf.getvalue()) == "#0080ff"


def test_fully_transparent_image_falls_back_to_default():
    assert extract_dominant_color(_png((200, 10, 10, 0))) == "#2563eb"


def test_unreadable_source_falls_back_to_default(tmp_path):
    assert extract_dominant_color(b"not an image") == "#2563eb"
    assert extract_dominant_color(tmp_path / "missing.png") == "#2563eb"


def test_reads_from_path(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(_png((1, 2, 3, 255)))

    assert extract_dominant_color(path) == "#010203"


def test_to_data_url():
    raw = _png((1, 2, 3, 255))

    assert to_data_url(raw).startswith("data:image/png;base64,")
    assert to_data_url(b"abc", "image/svg+xml") == "data:image/svg+xml;base64,YWJj"
    assert to_data_url(b"abc").startswith("data:application/octet-stream;base64,")
