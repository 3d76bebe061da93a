#!/usr/bin/env python3

import fnmatch
import os

from setuptools import setup
from setuptools.command import sdist


def glob(fname):
    return fnmatch.filter(os.listdir(os.path.abspath(os.path.dirname(__file__))), fname)


# monkey patch setuptools to use distutils owner/group functionality
sdist_org = sdist.sdist


class sdist_new(sdist_org):
    def initialize_options(self):
        sdist_org.initialize_options(self)
        self.owner = self.group = 'root'


sdist.sdist = sdist_new  # type: ignore

__name__ = "git-linestage"

setup(
    data_files=[
        (os.path.join('share', 'doc', __name__), glob('*.rst')),
    ],
)
