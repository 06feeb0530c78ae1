"""
Resolve model weights to local files.

Usage:
    from imei_scanner.models import registry

    rec = registry.get("paddle_ocr", "recognizer")   # local path, downloaded on first use
    registry.prefetch()                             # fetch everything before going offline
    print(registry.status())
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config import ALL_GROUPS, HF_REPO, LOCAL_MODEL_DIR, ModelFile, ModelGroup

logger = logging.getLogger(__name__)


class ModelRegistry:
    """
    Lookup of scanner weights by (group, key)

    A copy under ``local_dir`` takes precedence. Otherwise the file is fetched
    with huggingface_hub, which caches it and resumes interrupted downloads.
    """

    def __init__(
        self,
        repo_id: str = HF_REPO,
        groups: Optional[Dict[str, ModelGroup]] = None,
        local_dir: Optional[Union[str, Path]] = LOCAL_MODEL_DIR,
    ):
        self.repo_id = repo_id
        self.groups = groups if groups is not None else ALL_GROUPS
        self.local_dir = Path(local_dir) if local_dir else None

    def get(self, group_name: str, file_key: str) -> Path:
        """Local path of one weight file.

        Raises:
            KeyError: unknown group or file key
        """
        return self._fetch(self._group(group_name).file(file_key))

    def group_paths(self, group_name: str) -> Dict[str, Path]:
        group = self._group(group_name)
        return {f.key: self._fetch(f) for f in group.files}

    def prefetch(self) -> List[Path]:
        """Make every known file available locally."""
        return [path for name in self.groups for path in self.group_paths(name).values()]

    def missing(self) -> List[str]:
        """Repo filenames that would need a download."""
        return [
            f.filename
            for group in self.groups.values()
            for f in group.files
            if self._available(f) is None
        ]

    def status(self) -> str:
        lines = [f"Model weights ({self.repo_id})"]
        if self.local_dir is not None:
            lines.append(f"Local directory: {self.local_dir}")
        for group in self.groups.values():
            lines.append(f"{group.name}: {group.description}")
            for f in group.files:
                path = self._available(f)
                state = str(path) if path is not None else "MISSING"
                lines.append(f"  {f.key:<12} {f.filename:<32} {state}")
        return "\n".join(lines)

    def _group(self, name: str) -> ModelGroup:
        try:
            return self.groups[name]
        except KeyError:
            raise KeyError(f"No model group '{name}' (known: {', '.join(self.groups)})") from None

    def _local(self, model_file: ModelFile) -> Optional[Path]:
        if self.local_dir is None:
            return None
        path = self.local_dir / model_file.filename
        return path if path.is_file() else None

    def _fetch(self, model_file: ModelFile) -> Path:
        local = self._local(model_file)
        if local is not None:
            return local

        from huggingface_hub import hf_hub_download

        logger.info("Fetching %s from %s", model_file.filename, self.repo_id)
        return Path(hf_hub_download(self.repo_id, model_file.filename))

    def _available(self, model_file: ModelFile) -> Optional[Path]:
        local = self._local(model_file)
        if local is not None:
            return local

        from huggingface_hub import try_to_load_from_cache

        cached = try_to_load_from_cache(self.repo_id, model_file.filename)
        # anything but a str means "not cached"
        return Path(cached) if isinstance(cached, str) else None


registry = ModelRegistry()
