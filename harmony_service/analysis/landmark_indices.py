"""
Index map for the 68-point (iBUG 300-W) facial landmark convention.

"Right" and "left" refer to the subject's sides; in a frontal photo the
subject's right side appears on the image left.
"""

LANDMARK_COUNT = 68

JAW = tuple(range(0, 17))
RIGHT_BROW = tuple(range(17, 22))
LEFT_BROW = tuple(range(22, 27))
NOSE_BRIDGE = tuple(range(27, 31))
LOWER_NOSE = tuple(range(31, 36))
RIGHT_EYE = tuple(range(36, 42))
LEFT_EYE = tuple(range(42, 48))
OUTER_LIP = tuple(range(48, 60))
INNER_LIP = tuple(range(60, 68))

# Jaw
RIGHT_ZYGION = 0
LEFT_ZYGION = 16
RIGHT_GONION = 4
LEFT_GONION = 12
MENTON = 8

# Brows
RIGHT_BROW_PEAK = 19
LEFT_BROW_PEAK = 24

# Nose
NASION = 27
NOSE_TIP = 30
RIGHT_ALAR = 31
LEFT_ALAR = 35
SUBNASALE = 33

# Eyes
RIGHT_EYE_OUTER = 36
RIGHT_EYE_INNER = 39
LEFT_EYE_INNER = 42
LEFT_EYE_OUTER = 45

# Lips
RIGHT_MOUTH_CORNER = 48
LEFT_MOUTH_CORNER = 54
UPPER_LIP_TOP = 51
LOWER_LIP_BOTTOM = 57
UPPER_LIP_INNER = 62
LOWER_LIP_INNER = 66

# Bilateral (right, left) pairs mirrored about the facial midline
JAW_PAIRS = tuple((i, 16 - i) for i in range(0, 8))
BROW_PAIRS = ((17, 26), (18, 25), (19, 24), (20, 23), (21, 22))
EYE_PAIRS = ((36, 45), (37, 44), (38, 43), (39, 42), (40, 47), (41, 46))
MOUTH_PAIRS = ((48, 54), (49, 53), (50, 52), (59, 55), (58, 56))
