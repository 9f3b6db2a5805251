#!/usr/bin/env python
# -*- encoding: utf-8 -*-

# Copyright 2011-2021, Nigel Small
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


__all__ = ["__author__", "__copyright__", "__email__", "__license__", "__package__", "__version__",
           "get_metadata"]

__author__ = "Nigel Small <technige@nige.tech>"
__copyright__ = "2011-2021, Nigel Small"
__email__ = "py2neo@nige.tech"
__license__ = "Apache License, Version 2.0"
__package__ = "neoshell"
__version__ = "2021.1.0"


def get_metadata():
    """ Return the core packaging metadata for this project.
    """
    return {
        "name": __package__,
        "version": __version__,
        "description": "Command shell for running Cypher against Neo4j",
        "author": __author__.partition(" <")[0],
        "author_email": __email__,
        "url": "https://py2neo.org/",
        "license": __license__,
        "python_requires": ">=3.6",
        "classifiers": [
            "Development Status :: 5 - Production/Stable",
            "Environment :: Console",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: Apache Software License",
            "Operating System :: OS Independent",
            "Programming Language :: Python :: 3",
            "Topic :: Database",
            "Topic :: Utilities",
        ],
    }
