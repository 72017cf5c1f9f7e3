"""
Extração da matrícula do funcionário a partir do nome do arquivo.

Aceita padrões como "MTI12345 - Nome", "MTI12345_Nome", "12345.Nome.Sobrenome"
e "Funcionario_12345". Nunca falha: no pior caso devolve o próprio nome.
"""
import re
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# Ordem importa: " - " antes de "-" para não quebrar matrículas com hífen
SEPARATORS = (' - ', '_', '.', ' ', '-')

MTI_ID_PATTERN = re.compile(r'^MTI\d+$', re.IGNORECASE | re.ASCII)
MTI_SEARCH_PATTERN = re.compile(r'MTI\d+', re.IGNORECASE | re.ASCII)
NUMERIC_ID_PATTERN = re.compile(r'^\d{3,}$', re.ASCII)
ALPHANUMERIC_ID_PATTERN = re.compile(r'^[A-Za-z0-9]{3,}$')
DIGIT_PATTERN = re.compile(r'\d', re.ASCII)
DIGIT_RUN_PATTERN = re.compile(r'\d+', re.ASCII)


def is_valid_employee_id(candidate: str) -> bool:
    """Verifica se o texto parece uma matrícula válida"""
    clean_id = candidate.strip()

    if MTI_ID_PATTERN.match(clean_id):
        return True

    # Numérico com pelo menos 3 dígitos
    if NUMERIC_ID_PATTERN.match(clean_id):
        return True

    # Alfanumérico com pelo menos 3 caracteres e algum dígito
    if ALPHANUMERIC_ID_PATTERN.match(clean_id) and DIGIT_PATTERN.search(clean_id):
        return True

    return False


def _split_on_separators(filename: str) -> Optional[str]:
    for separator in SEPARATORS:
        if separator not in filename:
            continue
        candidate = filename.split(separator, 1)[0].strip()
        if is_valid_employee_id(candidate):
            return candidate
    return None


def _whole_filename(filename: str) -> Optional[str]:
    candidate = filename.strip()
    return candidate if is_valid_employee_id(candidate) else None


def _mti_anywhere(filename: str) -> Optional[str]:
    match = MTI_SEARCH_PATTERN.search(filename)
    return match.group(0) if match else None


def _first_digit_run(filename: str) -> Optional[str]:
    match = DIGIT_RUN_PATTERN.search(filename)
    return match.group(0) if match else None


STRATEGIES: List[Callable[[str], Optional[str]]] = [
    _split_on_separators,
    _whole_filename,
    _mti_anywhere,
    _first_digit_run,
]


def extract_employee_id(filename: str) -> str:
    """
    Extrai a matrícula de um nome de arquivo (sem extensão).

    Args:
        filename: Nome do arquivo sem a extensão
    Returns:
        str: Matrícula encontrada ou o nome original quando nenhuma
        estratégia se aplica
    """
    for strategy in STRATEGIES:
        employee_id = strategy(filename)
        if employee_id:
            return employee_id

    logger.debug(f"Nenhuma matrícula encontrada em '{filename}', usando nome original")
    return filename
