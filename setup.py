#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="archshape",
        packages=find_packages(include=["archshape", "archshape.*"]),
        python_requires='>3.10.0',
        version="0.1.0",
        license="MIT",
        description="Parametric voxel-cell shapes: orientation, collision volumes and baked geometry",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["voxel", "geometry", "collision"],
        classifiers=[],
        include_package_data=True,
        install_requires=[
            "numpy",
            "scipy",
        ],
        extras_require={
            "test": ["pytest"],
        },
        zip_safe=False,
    )
