#!/usr/bin/env python
from setuptools import setup
import os


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, 'src', 'svganim', 'version.py')
    with open(filename, 'rb') as fp:
        return fp.read().decode('utf8').split('=')[1].strip(" \n'")


def readme():
    with open(os.path.join(os.path.dirname(__file__), 'README.rst')) as f:
        return f.read()


setup(
    name='svganim',
    version=get_version(),
    description='Embed, remove and detect animations in SVG icons',
    long_description=readme(),
    long_description_content_type='text/x-rst',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Text Processing :: Markup :: XML',
    ],
    keywords='svg icon animation css',
    license='MIT License',
    package_dir={'': 'src'},
    packages=[
        'svganim',
    ],
    python_requires='>=3.10',
    install_requires=[],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': ['svganim=svganim.__main__:main']
    },
    )
