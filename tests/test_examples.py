import unittest

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from examples import (
    automala_example01_standard_normal,
    automala_example02_rosenbrock_adaptation,
    automala_example03_funnel,
)


class TestExamples(unittest.TestCase):
    def tearDown(self):
        plt.close("all")

    def test_01(self):
        automala_example01_standard_normal.main()

    def test_02(self):
        automala_example02_rosenbrock_adaptation.main()

    def test_03(self):
        automala_example03_funnel.main()


if __name__ == "__main__":
    unittest.main()
