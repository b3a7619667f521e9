"""
Configuration parameters for the cloud optics engine
"""

import tree_math


@tree_math.struct
class CloudOpticsParameters:
    """Configuration parameters for LUT-based cloud optics"""

    # Raise particle sizes below a table's lower bound to that bound before
    # interpolating. When False, such sizes extrapolate linearly from the
    # first two table rows.
    clip_size_to_lower_bound: bool

    # Condensate path above which a cell counts as cloudy in compute_cloud_mask
    mask_threshold: float

    @classmethod
    def default(cls, clip_size_to_lower_bound=False, mask_threshold=0.0) -> 'CloudOpticsParameters':
        """Return default cloud optics parameters"""
        return cls(
            clip_size_to_lower_bound=clip_size_to_lower_bound,
            mask_threshold=mask_threshold,
        )
