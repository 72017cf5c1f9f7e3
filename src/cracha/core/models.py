import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class InputPhoto:
    filename: str
    data: bytes = field(repr=False)

    @property
    def basename(self) -> str:
        """Nome do arquivo sem diretórios, aceitando / e \\ como separador"""
        return self.filename.replace('\\', '/').rsplit('/', 1)[-1]

    @property
    def stem(self) -> str:
        """Nome do arquivo sem a última extensão"""
        name = self.basename
        if '.' not in name:
            return name
        return name.rsplit('.', 1)[0]

    @property
    def extension(self) -> str:
        return os.path.splitext(self.basename)[1].lower()


@dataclass(frozen=True)
class FaceBoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    def scaled(self, factor_x: float, factor_y: float) -> 'FaceBoundingBox':
        return FaceBoundingBox(
            x=self.x * factor_x,
            y=self.y * factor_y,
            width=self.width * factor_x,
            height=self.height * factor_y
        )

    def to_dict(self) -> Dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class CropRectangle:
    x: float
    y: float
    width: float
    height: float

    def to_slice(self, image_width: int, image_height: int) -> Tuple[int, int, int, int]:
        """
        Converte o retângulo em limites inteiros (top, bottom, left, right)
        para fatiar o array da imagem. Sempre mantém ao menos 1 pixel e nunca
        ultrapassa as bordas.
        """
        left = min(int(round(self.x)), image_width - 1)
        top = min(int(round(self.y)), image_height - 1)
        right = max(left + 1, min(int(round(self.x + self.width)), image_width))
        bottom = max(top + 1, min(int(round(self.y + self.height)), image_height))
        return top, bottom, left, right

    def to_dict(self) -> Dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass
class ProcessedPhoto:
    data: bytes = field(repr=False)
    identifier: Optional[str] = None
    face_box: Optional[FaceBoundingBox] = None
    crop: Optional[CropRectangle] = None


@dataclass(frozen=True)
class PhotoSuccess:
    filename: str
    identifier: str
    original_filename: str

    def to_dict(self) -> Dict:
        return {
            'filename': self.filename,
            'identifier': self.identifier,
            'original_filename': self.original_filename
        }


@dataclass(frozen=True)
class PhotoFailure:
    filename: str
    reason: str
    error_type: str

    def to_dict(self) -> Dict:
        return {
            'filename': self.filename,
            'reason': self.reason,
            'error_type': self.error_type
        }


@dataclass(frozen=True)
class BatchResult:
    archive: bytes = field(repr=False)
    succeeded: Tuple[PhotoSuccess, ...]
    failed: Tuple[PhotoFailure, ...]
    processing_time: float = 0.0

    @property
    def total_photos(self) -> int:
        return len(self.succeeded) + len(self.failed)

    def succeeded_identifiers(self) -> List[str]:
        return [entry.identifier for entry in self.succeeded]

    def to_dict(self) -> Dict:
        """Relatório serializável em JSON (sem os bytes do arquivo)"""
        return {
            'total_photos': self.total_photos,
            'total_succeeded': len(self.succeeded),
            'total_failed': len(self.failed),
            'processing_time': self.processing_time,
            'succeeded': [entry.to_dict() for entry in self.succeeded],
            'failed': [entry.to_dict() for entry in self.failed]
        }
