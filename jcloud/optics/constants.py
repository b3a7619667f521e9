"""Constants and common keys in the cloud optics library."""

# 1-based index of the intermediately rough ice category in the RRTMGP
# ice lookup tables.
ICE_ROUGHNESS_INDEX = 2

# Minimum number of particle sizes in a lookup table.
MIN_TABLE_STEPS = 2

# Keys of the cloud optics lookup tables, as named in the RRTMGP data files.
LIQUID_BOUND_KEYS = ('radliq_lwr', 'radliq_upr', 'radliq_fac')
ICE_BOUND_KEYS = ('radice_lwr', 'radice_upr', 'radice_fac')
LIQUID_TABLE_KEYS = ('lut_extliq', 'lut_ssaliq', 'lut_asyliq')
ICE_TABLE_KEYS = ('lut_extice', 'lut_ssaice', 'lut_asyice')
