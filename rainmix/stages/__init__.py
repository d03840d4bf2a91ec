"""
rainmix Pipeline Stages

Fixed order:
    1. clean     : Low-pass + denoise
    2. layer     : Pink-noise bed (+ optional echo)
    3. loop      : Seamless end -> start crossfade
    4. normalize : Loudness normalization
    5. phone     : Phone-friendly export
    6. room      : Sub/room-friendly export
    7. storm     : Distant storm undertone (optional)
"""
