from .response import Response


class IntonationResponse(Response):
    """
    A wrapper class for intonation analysis results.

    This class contains:
    - score (int): Intonation score in [0, 100].
    - feedback (str): Templated feedback, or guidance when the recording
      could not be analyzed.

    Only on a successful analysis:
    - range (float): Max minus min pitch in Hz, 2 decimals.
    - sd (float): Standard deviation of the pitch contour, 2 decimals.
    - slope (float): (last - first) / count of the contour, 4 decimals.
    - pitchCount (int): Number of pitch estimates in the contour.
    - meanPitch (float): Mean pitch in Hz, 2 decimals.
    """

    def __init__(self,
                 score: int = 0,
                 feedback: str = "",
                 range: float | None = None,
                 sd: float | None = None,
                 slope: float | None = None,
                 pitch_count: int | None = None,
                 mean_pitch: float | None = None):
        super().__init__(score=score, feedback=feedback)

        if pitch_count is not None:
            self.set_value("range", round(float(range), 2))
            self.set_value("sd", round(float(sd), 2))
            self.set_value("slope", round(float(slope), 4))
            self.set_value("pitchCount", int(pitch_count))
            self.set_value("meanPitch", round(float(mean_pitch), 2))

    @property
    def succeeded(self) -> bool:
        return "pitchCount" in self
