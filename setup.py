import setuptools

setuptools.setup(
    name="typedsmt",
    version="0.0.1",

    package_dir={"": "src"},
    package_data={"typedsmt": ["py.typed"]},
    packages=setuptools.find_packages(where="src"),
    python_requires="~=3.9",
    install_requires=["numpy", "cvc5"],
    extras_require={"test": ["pytest"]},
)
