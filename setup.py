from setuptools import setup, find_packages

setup(
    name='co2-pipeline-optimizer',
    version='0.1.0',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    install_requires=[
        'numpy',
        'scipy',
        'pydantic>=2',
        'pandas',
        'matplotlib',
        'seaborn',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'co2-pipeline=co2_pipeline.cli.main:main',
        ],
    },
)
