import io
import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("SUPABASE_STORAGE_LOCAL_DIR", tempfile.mkdtemp(prefix="image-tools-"))


@pytest.fixture(scope="session")
def app():
    # lazy import after env configured
    from src.main import create_app

    return create_app()


@pytest.fixture(scope="session")
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def local_dir() -> Path:
    return Path(os.environ["SUPABASE_STORAGE_LOCAL_DIR"])


@pytest.fixture()
def make_image():
    """Factory for encoded test images of a given size, color and format."""

    def _make(w=40, h=20, color=(128, 64, 32), fmt="PNG", mode="RGB") -> bytes:
        img = Image.new(mode, (w, h), color)
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make


def open_image(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture()
def open_stored(local_dir):
    """Open an artifact written by the local storage fallback."""

    def _open(file_name: str) -> Image.Image:
        return open_image((local_dir / file_name).read_bytes())

    return _open
