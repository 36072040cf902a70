import sys
from pathlib import Path
from textwrap import dedent
from types import ModuleType
from typing import Callable
from typing import Generator
from typing import List

import pytest

from remove_async_await.util import import_module_from_file

_module_counter = 1

ModuleFactory = Callable[[str], ModuleType]


@pytest.fixture
def make_module(tmp_path: Path) -> Generator[ModuleFactory, None, None]:
    """
    Write the given source to a new Python file and import it as a module.  Decorators that read a function's source
    need a real file to read it from.
    """
    created: List[str] = []

    def factory(source: str) -> ModuleType:
        global _module_counter
        module_name = f"temporary_module_{_module_counter}"
        _module_counter += 1
        created.append(module_name)
        module_file = tmp_path.joinpath(f"{module_name}.py")
        module_file.write_text(dedent(source))
        return import_module_from_file(module_name, module_file)

    yield factory

    for module_name in created:
        sys.modules.pop(module_name, None)
