import logging
import os
from datetime import datetime
from cracha.config.settings import LOG_DIR

def setup_logging(log_level=logging.INFO, log_dir=LOG_DIR):
    """Configura logging da aplicação (arquivo diário + console)"""

    # Criar diretório de logs se não existir
    os.makedirs(log_dir, exist_ok=True)

    # Nome do arquivo de log com timestamp
    log_file = os.path.join(
        log_dir,
        f'cracha_{datetime.now().strftime("%Y%m%d")}.log'
    )

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )

    # Reduzir verbosidade de alguns loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)

    return log_file
