#!/usr/bin/env python

from setuptools import setup

setup(name='tanknet-solver',
      version='0.1.0',
      description='Theta-method tank network model with banded solves and Jacobian products',
      long_description="Theta-method tank network model with banded solves and Jacobian products",
      long_description_content_type="text/x-rst",
      packages=["tanknet_solver"],
      install_requires=[
          'numpy',
          'pandas',
          'scipy',
          'numba',
          'matplotlib'
      ],
      extras_require={
          'test': ['pytest']
      }
     )
