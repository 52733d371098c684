from setuptools import setup

setup(
    name="cef-audit-converter-infra",
    version="0.1.0",
    py_modules=["app"],
    packages=["stacks"],
    install_requires=[
        "aws-cdk-lib>=2.130.0",
        "constructs>=10.0.0",
    ],
    python_requires=">=3.9",
)
