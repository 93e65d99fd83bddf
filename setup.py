from setuptools import find_packages, setup
import pathlib


here = pathlib.Path(__file__).parent.resolve()


with open(here.joinpath('README.md')) as fd:
    long_description = fd.read()


setup(
    name='streaming-multipart',
    version='1.0.0',
    description='Streaming pull parser for multipart bodies',
    long_description=long_description,
    long_description_content_type='text/markdown',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=['smart_open'],
    extras_require={
        'test': ['pytest', 'requests-toolbelt'],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Internet :: WWW/HTTP :: Dynamic Content',
        'Topic :: Internet :: WWW/HTTP :: HTTP Servers',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
    keywords='form-data, forms, http, mime, multipart, streaming, web',
    python_requires='>=3.8',
)
