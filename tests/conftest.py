import json

import pytest


@pytest.fixture
def translation_folder(tmp_path):
    def write(files):
        root = tmp_path / "i18n"
        root.mkdir(exist_ok=True)
        for relative, document in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            contents = document if isinstance(document, str) else json.dumps(document)
            path.write_text(contents, "utf-8")
        return root

    return write
