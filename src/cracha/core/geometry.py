from typing import Sequence
from cracha.core.errors import NoFaceDetectedError
from cracha.core.models import CropRectangle, FaceBoundingBox

# Margem vertical assimétrica: mais espaço acima (cabelo/testa) que abaixo
TOP_PADDING_FACTOR = 1.5
BOTTOM_PADDING_FACTOR = 0.5


def compute_crop(image_width, image_height, face_box: FaceBoundingBox, radius_percent) -> CropRectangle:
    """
    Calcula a região de recorte ao redor da face.

    Args:
        image_width: Largura da imagem original
        image_height: Altura da imagem original
        face_box: Face selecionada
        radius_percent: Raio adaptativo (5-100), percentual do menor lado da face
    Returns:
        CropRectangle contido em [0, image_width) x [0, image_height)
    """
    radius = min(face_box.width, face_box.height) * radius_percent / 100
    top_padding = radius * TOP_PADDING_FACTOR
    bottom_padding = radius * BOTTOM_PADDING_FACTOR

    crop_x = max(0, face_box.x - radius)
    crop_y = max(0, face_box.y - top_padding)
    crop_width = min(image_width - crop_x, face_box.width + 2 * radius)
    crop_height = min(image_height - crop_y, face_box.height + top_padding + bottom_padding)

    return CropRectangle(x=crop_x, y=crop_y, width=crop_width, height=crop_height)


def select_largest_face(boxes: Sequence[FaceBoundingBox]) -> FaceBoundingBox:
    """Retorna a maior face detectada; empates ficam com a primeira"""
    if not boxes:
        raise NoFaceDetectedError("Nenhuma face detectada na imagem")

    largest = boxes[0]
    for box in boxes[1:]:
        if box.area > largest.area:
            largest = box
    return largest
