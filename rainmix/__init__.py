"""
rainmix: rain recording render pipeline

Runs a fixed sequence of ffmpeg stages over one input recording and
writes every result to <input-base>_renders/.

Pipeline Stages (fixed order):
    1. Clean (low-pass + denoise)         -> rain_clean.mp3
    2. Layer (pink-noise bed + echo)      -> rain_mixed.mp3
    3. Loop splice (triangular crossfade) -> rain_loop.mp3
    4. Normalize (loudness)               -> rain_final.mp3
    5. Phone export                       -> rain_phone.mp3
    6. Room export                        -> rain_room.mp3
    7. Storm undertone (optional)         -> lowrumble.wav, rain_distantstorm.mp3

Invariants:
    - Each stage's output is the next dependent stage's input
    - The first failed engine call stops the run
    - Re-running overwrites outputs in place
"""

__version__ = "1.0.0"
