from setuptools import setup, find_packages
setup(
    name="four_seasons_catalog",
    version="0.0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    install_requires=[
        "httpx",
        "pydantic>=2",
        "fastapi",
        "anthropic",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'four_seasons_catalog=four_seasons_catalog.__main__:main'
        ]
    }
)
