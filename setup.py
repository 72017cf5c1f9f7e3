from setuptools import setup, find_packages

setup(
    name="cracha",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        # API
        "fastapi>=0.109.0",
        "python-multipart>=0.0.6",
        "uvicorn>=0.27.0",

        # Processamento de imagens
        "Pillow>=10.1.0",
        "face-recognition>=1.3.0",
        "opencv-python>=4.8.1.78",
        "numpy>=1.26.3",

        # Utilitários
        "python-dotenv>=1.0.0",
        "colorama>=0.4.6",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.1",
            "pytest-cov>=4.1.0",
            "httpx>=0.25.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "cracha=cracha.main:main",
        ]
    },
    python_requires=">=3.9",
)
