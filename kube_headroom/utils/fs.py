import json
import os

import yaml


def dump_data(data, format: str = 'yaml') -> str:
    if format.lower() == 'json':
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, sort_keys=False)


def save_text_to_file(content: str, path: str):
    '''Write content to path, creating parent directories.'''
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content if content.endswith("\n") else content + "\n")

