import io
import logging
import zipfile
from typing import List, Tuple

logger = logging.getLogger(__name__)

# Data fixa nas entradas: mesmo conteúdo gera o mesmo arquivo byte a byte
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)

class ZipArchiveWriter:
    """Monta um arquivo ZIP em memória com as miniaturas do lote"""

    def __init__(self, folder='', compression=zipfile.ZIP_DEFLATED):
        self.folder = folder.strip('/')
        self.compression = compression
        self._entries: List[Tuple[str, bytes]] = []
        self._finalized = False

    @property
    def entry_names(self) -> List[str]:
        return [name for name, _ in self._entries]

    def add(self, entry_name: str, data: bytes):
        if self._finalized:
            raise RuntimeError("Arquivo já finalizado")
        if self.folder:
            entry_name = f"{self.folder}/{entry_name}"
        self._entries.append((entry_name, data))

    def finalize(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', compression=self.compression) as archive:
            for entry_name, data in self._entries:
                info = zipfile.ZipInfo(entry_name, date_time=FIXED_DATE_TIME)
                info.compress_type = self.compression
                archive.writestr(info, data)

        self._finalized = True
        content = buffer.getvalue()
        logger.debug(f"ZIP gerado com {len(self._entries)} entradas ({len(content)} bytes)")
        return content
