# Copyright 2025 Roger Cibrian
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

"""File I/O for layerconf.

This module provides the YAML boundary of the configuration engine:

- read_config_file / write_config_file: Tolerant reads, atomic writes
- decode / encode: Typed conversion between YAML mappings and config values

Example:
    ```python
    from pathlib import Path
    from layerconf.io import read_config_file

    data = read_config_file(Path("config/app.yaml"))
    if data is None:
        print("No usable config file, defaults apply")
    ```
"""

from .yaml_codec import (
    decode,
    dump_yaml,
    encode,
    read_config_file,
    write_config_file,
)

__all__ = [
    "decode",
    "dump_yaml",
    "encode",
    "read_config_file",
    "write_config_file",
]
