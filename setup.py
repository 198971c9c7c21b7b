"""Install the gitusers package."""

from setuptools import setup, find_packages

setup(
    name='gitusers',
    version='0.1.0',
    packages=find_packages(include=['gitusers', 'gitusers.*'],
                           exclude=['*.tests']),
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "requests",
        "python-json-logger>=3.1",
        "click",
        "pytz",
    ],
    extras_require={
        'test': ["pytest", "hypothesis"],
    },
    entry_points={
        'console_scripts': ['gitusers=gitusers.cli:cli'],
    },
    zip_safe=False
)
