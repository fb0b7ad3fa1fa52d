"""Chi-square fitting of simulated line shapes to excitation-energy spectra, with kinematics, rate and plotting helpers."""

__version__ = "0.1.0"