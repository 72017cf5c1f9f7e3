import logging
from colorama import init, Fore, Style

init(autoreset=True)

class ColoredFormatter(logging.Formatter):
    """Formatador de console com cores e símbolos por nível"""

    COLORS = {
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
        'DEBUG': Fore.BLUE
    }

    SYMBOLS = {
        'INFO': '✓',
        'WARNING': '⚠',
        'ERROR': '✗',
        'CRITICAL': '☠',
        'DEBUG': '⚙'
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        symbol = self.SYMBOLS.get(record.levelname, '')
        message = record.getMessage()

        # Marcar início/fim de lote para leitura rápida no terminal
        if message.startswith("Iniciando"):
            prefix = "▶ "
        elif message.startswith("Lote finalizado"):
            prefix = "⏹ "
        else:
            prefix = ""

        # Trabalhar numa cópia para não vazar cores para outros handlers
        record = logging.makeLogRecord(record.__dict__)
        record.msg = f"{prefix}{message}"
        record.args = None
        record.levelname = f"{color}{symbol} {record.levelname}{Style.RESET_ALL}"
        return super().format(record)

def setup_colored_logging(level=logging.INFO):
    """Configura logging colorido no console"""
    formatter = ColoredFormatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remover handlers existentes
    root_logger.handlers = []
    root_logger.addHandler(console)

    logging.getLogger('PIL').setLevel(logging.WARNING)
