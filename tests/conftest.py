import cv2
import numpy as np
import pytest
from cracha.core import instance
from cracha.core.batch_processor import BatchProcessor
from cracha.core.models import FaceBoundingBox
from cracha.core.transcoder import PhotoTranscoder


class BrightRegionDetector:
    """Detector falso: a "face" é a região clara (>200) da imagem"""

    def __init__(self):
        self.calls = []

    def detect_faces(self, image):
        self.calls.append(image.shape)
        mask = image.max(axis=2) > 200
        if not mask.any():
            return []
        rows = np.where(mask.any(axis=1))[0]
        cols = np.where(mask.any(axis=0))[0]
        return [FaceBoundingBox(
            x=int(cols[0]),
            y=int(rows[0]),
            width=int(cols[-1] - cols[0] + 1),
            height=int(rows[-1] - rows[0] + 1)
        )]


def make_image(width=640, height=480, face=(200, 150, 160, 160), ext='.png'):
    """Gera imagem sintética com um retângulo branco no lugar da face"""
    image = np.full((height, width, 3), 40, dtype=np.uint8)
    if face:
        x, y, w, h = face
        image[y:y + h, x:x + w] = 255
    ok, buffer = cv2.imencode(ext, image)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def detector():
    return BrightRegionDetector()


@pytest.fixture
def transcoder(detector):
    return PhotoTranscoder(detector, detection_timeout=5)


@pytest.fixture
def processor(transcoder):
    return BatchProcessor(transcoder, max_workers=2)


@pytest.fixture
def face_photo():
    return make_image()


@pytest.fixture
def faceless_photo():
    return make_image(face=None)


@pytest.fixture(autouse=True)
def reset_api_instance():
    yield
    instance.set_batch_processor(None)
