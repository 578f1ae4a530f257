# editagent: Prompt text shipped in the resources/ directory next to this module.

import pathlib

RESOURCES_DIR = pathlib.Path(__file__).resolve().parent / "resources"


def get_prompt(name: str, **kwargs) -> str:
    """
    Load a text prompt from resources/.

    With kwargs, the text is passed through str.format(**kwargs); without, it is
    returned raw so literal braces survive.
    """
    data = (RESOURCES_DIR / name).read_text(encoding="utf-8")
    if kwargs:
        return data.format(**kwargs)
    return data
