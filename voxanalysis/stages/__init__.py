"""
VoxAnalysis v1 Pipeline Stages

Fixed groups — stages within a group are independent:
    1. decode       — WAV container → AudioFormat + SampleSequence
       fingerprint  — SHA-256 of raw bytes
    2. statistics   — RMS, peak, silence ratio, edit candidates
       waveform     — Fixed-size visualization envelope
"""
