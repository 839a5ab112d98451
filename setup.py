"""Install the user accounts API package."""

from setuptools import setup, find_packages

setup(
    name='userapi',
    version='0.1',
    packages=find_packages(exclude=['*test*']),
    py_modules=['wsgi'],
    install_requires=[
        "flask",
        "werkzeug",
        "flask-sqlalchemy",
        "sqlalchemy",
        "pyjwt",
        "wtforms",
        "email-validator",
        "retry",
        "pytz"
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
            "python-dateutil"
        ]
    },
    zip_safe=False
)
