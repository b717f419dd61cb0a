from setuptools import setup, find_packages


requirements = [
    "cocotb==1.9.2",
    "colorlog",
    "toml",
    "tabulate",
    "bitstring>=4.2",
    "numpy<2.0",
]

test_requirements = [
    "pytest",
    "pytest-cov",
    "pytest-xdist",
]

setup(
    name="fmul-verif",
    version="1.0.0",
    description="Differential verification of binary32 floating-point multipliers",
    python_requires=">=3.9",
    package_dir={
        "": "src",
    },
    packages=find_packages("src"),
    install_requires=requirements,
    extras_require={"test": test_requirements},
    entry_points={
        "console_scripts": [
            "fmul-verify=fmul_cocotb.cli:main",
        ],
    },
)
