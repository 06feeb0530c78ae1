"""CTC decoding for recognizer output."""

from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

_DEFAULT_CHARACTERS = "0123456789abcdefghijklmnopqrstuvwxyz"


class CTCLabelDecode:
    """Greedy CTC decoder: argmax per step, collapse repeats, drop blanks."""

    def __init__(
        self,
        character_dict_path: Optional[Union[str, Path]] = None,
        use_space_char: bool = False,
    ):
        """
        Args:
            character_dict_path: One character per line; None uses [0-9a-z]
            use_space_char: Append " " to the vocabulary
        """
        if character_dict_path is None:
            characters = list(_DEFAULT_CHARACTERS)
        else:
            text = Path(character_dict_path).read_bytes().decode("utf-8")
            characters = [line.rstrip("\r") for line in text.split("\n")]
            # trailing newline at EOF is not a vocabulary entry
            if characters and characters[-1] == "":
                characters.pop()
        if use_space_char:
            characters.append(" ")

        # index 0 is the CTC blank
        self.character = ["blank"] + characters

    def __call__(self, preds: np.ndarray) -> List[Tuple[str, float]]:
        """
        Args:
            preds: [batch, time, num_classes] probabilities

        Returns:
            One (text, mean confidence) tuple per batch item
        """
        if isinstance(preds, (tuple, list)):
            preds = preds[-1]
        return self.decode(preds.argmax(axis=2), preds.max(axis=2))

    def decode(self, text_index: np.ndarray, text_prob: Optional[np.ndarray] = None) -> List[Tuple[str, float]]:
        results = []
        for batch_idx in range(len(text_index)):
            indices = np.asarray(text_index[batch_idx])
            keep = np.ones(len(indices), dtype=bool)
            keep[1:] = indices[1:] != indices[:-1]
            keep &= indices != 0

            text = "".join(self.character[i] for i in indices[keep])
            if text_prob is not None and keep.any():
                confidence = float(np.mean(np.asarray(text_prob[batch_idx])[keep]))
            else:
                confidence = 0.0 if not keep.any() else 1.0
            results.append((text, confidence))
        return results
