import setuptools

with open('README.md') as f:
    data = f.read()

setuptools.setup(
    name='pyfiber',
    version='0.1.0',
    description='Decoder for fiber payment channel artifacts on CKB',
    packages=['pyfiber'],
    long_description=data,
    long_description_content_type='text/markdown',
    python_requires='>=3.11',
    install_requires=[
        'loguru',
        'requests',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
)
