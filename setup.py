# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from setuptools import find_packages, setup
from os import path

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.MD"), encoding="utf-8") as f:
    long_description = f.read()

with open(path.join(this_directory, "requirements.txt"), encoding="utf-8") as f:
    install_requires = [
        req_line.strip()
        for req_line in f.readlines()
        if req_line.strip() != ""
        if req_line.strip()[0] != "#"
        if "-e ." not in req_line
    ]

test_requires = [
    "blockbuster>=1.5.5",
    "pytest>=8.0.0",
    "pytest-asyncio>=0.23.0",
    "pytest-httpserver>=1.0.8",
    "werkzeug>=2.0",
]

setup(
    name="recurlypy",
    packages=find_packages(include=["recurlypy", "recurlypy.*"]),
    package_data={"recurlypy": ["py.typed"]},
    version="0.1.0",
    license="Apache license 2.0",
    description="recurlypy is a Pythonic client for the Recurly v3 API listings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords=["Recurly", "billing", "pagination"],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require={"test": test_requires},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
