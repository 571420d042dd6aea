from setuptools import setup

with open("requirements.txt") as f:
    required = f.read().splitlines()

exec(open("pyhypertorus/version.py").read())
setup(
    name="pyhypertorus",
    version=__version__,  # noqa: F821
    description="Numerical moments, sampling and distances for distributions on the hypertorus",
    install_requires=required,
    extras_require={"test": ["pytest"]},
    packages=["pyhypertorus"],
    python_requires=">=3.9",
)
