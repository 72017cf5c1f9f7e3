import os
from dotenv import load_dotenv

load_dotenv()

# Paths
LOG_DIR = os.getenv('LOG_DIR', 'logs')

# Saída padronizada (crachá)
OUTPUT_SIZE = int(os.getenv('OUTPUT_SIZE', '400'))  # Lado do quadrado de saída em pixels
JPEG_QUALITY = int(os.getenv('JPEG_QUALITY', '95'))
OUTPUT_EXTENSION = '.jpg'
ARCHIVE_NAME = os.getenv('ARCHIVE_NAME', 'processed_images.zip')

# Raio adaptativo (percentual do menor lado da face)
DEFAULT_RADIUS_PERCENT = int(os.getenv('DEFAULT_RADIUS_PERCENT', '20'))
MIN_RADIUS_PERCENT = 5
MAX_RADIUS_PERCENT = 100

# Face Detection
FACE_DETECTION_MODEL = os.getenv('FACE_DETECTION_MODEL', 'hog')  # ou "cnn" para GPU
FACE_DETECTION_UPSAMPLE = int(os.getenv('FACE_DETECTION_UPSAMPLE', '1'))
DETECTION_TIMEOUT = float(os.getenv('DETECTION_TIMEOUT', '30'))  # Segundos por foto
# Detecção roda numa cópia reduzida; o recorte é feito na imagem original (0 desabilita)
DETECTION_MAX_SIZE = int(os.getenv('DETECTION_MAX_SIZE', '800'))

# Processamento paralelo
BATCH_MAX_WORKERS = int(os.getenv('BATCH_MAX_WORKERS', '4'))  # Número de threads por lote

# Validação das fotos recebidas
ALLOWED_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp')
MAX_PHOTO_BYTES = int(os.getenv('MAX_PHOTO_BYTES', str(5 * 1024 * 1024)))  # 5MB por foto

# API
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('API_PORT', '8000'))

# Relatório no cabeçalho só até este tamanho; acima disso use response_format=json
REPORT_HEADER_MAX_BYTES = int(os.getenv('REPORT_HEADER_MAX_BYTES', '4096'))
