from setuptools import find_packages, setup

setup(
    name="image-updater",
    version="0.1.0",
    license="Apache License 2.0",

    python_requires=">=3.11",
    description="Rolls out image references across the tenant manifests of a "
                "deployment repository through pull requests.",

    packages=find_packages(exclude=('tests',)),
    package_data={'image_updater': ['templates/*.j2']},

    install_requires=[
        "sretoolbox>=1.2",
        "Click>=7.0,<9.0",
        "toml>=0.10.0,<0.11.0",
        "PyGithub>=2.1,<3.0",
        "ruamel.yaml>=0.17.22,<0.19.0",
        "Jinja2>=3.1,<4.0",
        "prometheus-client>=0.17,<1.0",
        "sentry-sdk>=1.40,<3.0",
        "pydantic>=2.5,<3.0",
    ],

    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-mock>=3.12",
        ],
    },

    test_suite="image_updater.test",

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
    ],
    entry_points={
        'console_scripts': [
            'image-updater = image_updater.cli:root',
        ],
    },
)
