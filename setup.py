from setuptools import setup, find_packages

setup(
    name="inference_iq",
    version="1.0.0",
    description="Inference Cost Estimator for LLM Workloads",
    author="Varcas",
    packages=find_packages(include=["inference_iq", "inference_iq.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "inference-iq=inference_iq.cli.main:main",
        ],
    },
)
