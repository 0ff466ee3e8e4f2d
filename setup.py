from setuptools import setup, find_packages

setup(
    name='enetcv',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.9',
    install_requires=[
        'pandas',
        'numpy',
        'scikit-learn',
        'joblib',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['enetcv=enetcv.cli:main'],
    },
    description='Cross-validated elastic-net logistic regression: imputation, scaling, path fitting and held-out evaluation.',
    author='Jason Orender',
    author_email='jason@orender.net',
)
