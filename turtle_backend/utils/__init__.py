from .math import clip, sign, wrap_pi
