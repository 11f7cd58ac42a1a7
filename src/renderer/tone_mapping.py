# renderer/tone_mapping.py
import math
import numpy as np
from numba import njit

# Largest channel value before quantization, so 256 * value stays below 256
MAX_INTENSITY = 0.999

@njit
def gamma_quantize_kernel(pixel_sums, samples_per_pixel, output):
    """
    Average summed samples, apply gamma-2 correction and write 8-bit values.
    pixel_sums is (n, 3) float64, output is (n, 3) uint8.
    """
    scale = 1.0 / samples_per_pixel
    for i in range(pixel_sums.shape[0]):
        for c in range(3):
            value = scale * pixel_sums[i, c]
            if value < 0.0:
                value = 0.0
            value = math.sqrt(value)
            if value > MAX_INTENSITY:
                value = MAX_INTENSITY
            output[i, c] = int(256.0 * value)

def gamma_quantize(pixel_sums: np.ndarray, samples_per_pixel: int) -> np.ndarray:
    """
    Convert summed linear colors of shape (..., 3) into displayable uint8 colors.
    """
    sums = np.ascontiguousarray(pixel_sums, dtype=np.float64)
    flat = sums.reshape(-1, 3)
    output = np.empty(flat.shape, dtype=np.uint8)
    gamma_quantize_kernel(flat, samples_per_pixel, output)
    return output.reshape(sums.shape)
