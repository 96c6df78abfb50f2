from typing import Dict, List


def extension_token(path: str) -> str:
    """Classify a file path: ``src/app.ts`` -> ``ts``, ``a/b/README`` -> ``README``"""
    if '.' in path:
        return path.rsplit('.', 1)[1]
    if '/' in path:
        return path.rsplit('/', 1)[1]
    return path


class ExtensionTable:
    """Per-author file extension touch counts plus every extension seen.

    Extensions keep discovery order so report columns stay stable.
    """

    def __init__(self):
        self.files_touched: Dict[str, Dict[str, int]] = {}
        self._discovered: Dict[str, None] = {}

    @property
    def extensions(self) -> List[str]:
        return list(self._discovered)

    def add_author(self, email: str) -> None:
        self.files_touched.setdefault(email, {})

    def record(self, email: str, path: str) -> str:
        token = extension_token(path)
        self._discovered[token] = None
        touched = self.files_touched.setdefault(email, {})
        touched[token] = touched.get(token, 0) + 1
        return token

    def row(self, email: str) -> List[int]:
        touched = self.files_touched.get(email, {})
        return [touched.get(ext, 0) for ext in self._discovered]

    def merge(self, other: 'ExtensionTable') -> None:
        """Add another table's counts; its new extensions follow the ones already seen"""
        for token in other._discovered:
            self._discovered[token] = None
        for email, touched in other.files_touched.items():
            mine = self.files_touched.setdefault(email, {})
            for token, count in touched.items():
                mine[token] = mine.get(token, 0) + count
