"""Shared type aliases for the sae_mortality package."""

import numpy as np
import pandas as pd

# Matrix-like inputs accepted by the public API.
ArrayLike = np.ndarray | pd.DataFrame

# Recognised link transforms for the summarizer.
TRANSFORMS = ("identity", "log")
