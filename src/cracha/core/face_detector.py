import logging
from threading import Lock
from typing import List
import numpy as np
from cracha.config.settings import FACE_DETECTION_MODEL, FACE_DETECTION_UPSAMPLE
from cracha.core.models import FaceBoundingBox

logger = logging.getLogger(__name__)

class FaceDetector:
    """
    Detector de faces baseado em face_recognition (dlib).

    O módulo face_recognition (e os modelos do dlib) só é carregado na
    primeira detecção. Uma instância pode ser compartilhada entre threads.
    """

    def __init__(self, model=FACE_DETECTION_MODEL, upsample=FACE_DETECTION_UPSAMPLE):
        self.model = model
        self.upsample = upsample
        self._backend = None
        self._lock = Lock()

    def _load(self):
        with self._lock:
            if self._backend is None:
                logger.info(f"Iniciando carregamento do detector de faces (modelo={self.model})")
                import face_recognition
                self._backend = face_recognition
                logger.info("Detector de faces carregado")
            return self._backend

    @property
    def loaded(self) -> bool:
        return self._backend is not None

    def detect_faces(self, image: np.ndarray) -> List[FaceBoundingBox]:
        """
        Detecta faces numa imagem RGB.

        Args:
            image: Imagem RGB (numpy array HxWx3)
        Returns:
            Lista de FaceBoundingBox em coordenadas da imagem (pode ser vazia)
        """
        backend = self._load()
        face_locations = backend.face_locations(
            image,
            number_of_times_to_upsample=self.upsample,
            model=self.model
        )

        # face_recognition devolve (top, right, bottom, left)
        boxes = []
        for top, right, bottom, left in face_locations:
            top, left = max(0, top), max(0, left)
            if right <= left or bottom <= top:
                continue
            boxes.append(FaceBoundingBox(x=left, y=top, width=right - left, height=bottom - top))
        return boxes
