import io
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import List, Tuple
import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError
from cracha.config.settings import (
    DETECTION_MAX_SIZE,
    DETECTION_TIMEOUT,
    JPEG_QUALITY,
    OUTPUT_SIZE
)
from cracha.core.errors import DecodeError, EncodeError, NoFaceDetectedError, OracleTimeoutError
from cracha.core.geometry import compute_crop, select_largest_face
from cracha.core.models import FaceBoundingBox, InputPhoto, ProcessedPhoto

logger = logging.getLogger(__name__)

class PhotoTranscoder:
    """
    Converte uma foto em miniatura quadrada centrada na face.

    decode -> detectar faces -> maior face -> recorte -> OUTPUT_SIZE x OUTPUT_SIZE -> JPEG
    """

    def __init__(self, detector, output_size=OUTPUT_SIZE, jpeg_quality=JPEG_QUALITY,
                 detection_timeout=DETECTION_TIMEOUT, detection_max_size=DETECTION_MAX_SIZE):
        self.detector = detector
        self.output_size = output_size
        self.jpeg_quality = jpeg_quality
        self.detection_timeout = detection_timeout
        self.detection_max_size = detection_max_size

    def transcode(self, photo: InputPhoto, radius_percent) -> ProcessedPhoto:
        image = self.decode(photo)
        height, width = image.shape[:2]

        boxes = self._detect(image)
        if not boxes:
            raise NoFaceDetectedError(f"Nenhuma face detectada em {photo.filename}")

        face_box = select_largest_face(boxes)
        crop = compute_crop(width, height, face_box, radius_percent)
        top, bottom, left, right = crop.to_slice(width, height)

        logger.debug(
            f"{photo.filename}: {len(boxes)} face(s), recorte "
            f"x={left} y={top} w={right - left} h={bottom - top} em {width}x{height}"
        )

        thumbnail = self._resize(np.ascontiguousarray(image[top:bottom, left:right]))
        data = self.encode(thumbnail)

        # Liberar memória
        del image, thumbnail

        return ProcessedPhoto(data=data, face_box=face_box, crop=crop)

    @staticmethod
    def decode(photo: InputPhoto) -> np.ndarray:
        """Decodifica os bytes da foto em array RGB, respeitando a orientação EXIF"""
        if not photo.data:
            raise DecodeError(f"Arquivo vazio: {photo.filename}")

        try:
            with Image.open(io.BytesIO(photo.data)) as img:
                oriented = ImageOps.exif_transpose(img)
                return np.array(oriented.convert('RGB'))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(f"Não foi possível abrir a imagem {photo.filename}: {str(e)}") from e

    def encode(self, image: np.ndarray) -> bytes:
        """Codifica imagem RGB em JPEG"""
        try:
            bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
            encode_param = [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality]
            ok, buffer = cv2.imencode('.jpg', bgr, encode_param)
        except cv2.error as e:
            raise EncodeError(f"Erro ao codificar JPEG: {str(e)}") from e

        if not ok:
            raise EncodeError("Erro ao codificar JPEG")
        return buffer.tobytes()

    def _resize(self, region: np.ndarray) -> np.ndarray:
        # Escala não uniforme: a saída é sempre quadrada
        height, width = region.shape[:2]
        size = self.output_size
        interpolation = cv2.INTER_AREA if width >= size and height >= size else cv2.INTER_CUBIC
        return cv2.resize(region, (size, size), interpolation=interpolation)

    def _detect(self, image: np.ndarray) -> List[FaceBoundingBox]:
        detection_image, (scale_x, scale_y) = self._detection_copy(image)

        if self.detection_timeout and self.detection_timeout > 0:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='face_detection')
            try:
                future = executor.submit(self.detector.detect_faces, detection_image)
                try:
                    boxes = future.result(timeout=self.detection_timeout)
                except FuturesTimeoutError:
                    future.cancel()
                    raise OracleTimeoutError(
                        f"Tempo limite de detecção excedido ({self.detection_timeout}s)"
                    )
            finally:
                # Não esperar a thread de detecção travada
                executor.shutdown(wait=False)
        else:
            boxes = self.detector.detect_faces(detection_image)

        if (scale_x, scale_y) != (1.0, 1.0):
            boxes = [box.scaled(scale_x, scale_y) for box in boxes]
        return list(boxes)

    def _detection_copy(self, image: np.ndarray) -> Tuple[np.ndarray, Tuple[float, float]]:
        """Reduz a imagem para detecção rápida mantendo proporção"""
        height, width = image.shape[:2]
        max_size = self.detection_max_size
        if not max_size or max(height, width) <= max_size:
            return image, (1.0, 1.0)

        scale = max_size / max(height, width)
        new_width = max(1, int(width * scale))
        new_height = max(1, int(height * scale))
        resized = cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_AREA)
        # Fatores para levar as caixas de volta à imagem original
        return resized, (width / new_width, height / new_height)
