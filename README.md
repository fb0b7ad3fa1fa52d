# li7fit

li7fit fits excitation-energy spectra with simulated peak line shapes plus a smooth
background, minimizing chi-square with Powell's method. It also has helpers for
converting centre-of-mass cross sections to the lab frame, estimating production
rates, plotting fit results and reading energy-loss tables.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## What it provides

- `li7fit.histogram`: a one-dimensional `Histogram` with under- and overflow bins,
  offering `find_bin`, `bin_center`, `content`, `set_content`, `rebin` and `copy`.
  `Histogram.to_file` writes a histogram as plain text (a header line, then one
  content per line) and `load_histogram` reads that format back.
- `li7fit.spectrum`: `efficiency_from_uniform` derives efficiency correction factors
  from a spectrum simulated with uniform excitation, and `apply_efficiency` applies
  them to a histogram. `SpectrumFit` holds a measured spectrum, loads simulated peak
  shapes with `load_peaks` (histograms or histogram files), evaluates `background`
  and `value`, computes `chi_square`, runs `minimize`, returns the fitted
  `components` and writes them with `write_table`. `BackgroundModel` selects the
  background shape: `LINEAR` or `THRESHOLD`.
- `li7fit.params`: `read_parameters` and `write_parameters` handle parameter files,
  where each line holds a value and a 0/1 flag that says whether the value is free
  in the fit; peak yields are kept as their square roots. `ParameterSet` separates
  free values from fixed ones with `free_values` and `with_free_values`.
  `append_record` appends a chi-square and the simulation file names to a log.
- `li7fit.linsolve`: `LinearSystem` solves small linear systems by Gauss-Jordan
  elimination without pivoting. `fit_scale` gives the least-squares scale of a
  model against data, and `ChiSquare.value` evaluates the chi-square for a scale.
- `li7fit.kinematics`: `get_jacobians` and `cm_to_lab` transform angles and cross
  sections of the d(6He,7Li)n reaction from the centre-of-mass frame to the lab
  frame. `read_fort202` reads fixed-column cross-section output,
  `integrate_cross_section` integrates a lab distribution over angle, and
  `production_rate` turns a cross section into events per second.
- `li7fit.plots`: `read_fit_table` reads the table written by
  `SpectrumFit.write_table` into a `FitTable`, and `plot_fit_table` draws it to an
  image file. `hourly_rate` converts a detector efficiency into detected events per
  hour, and `read_loss_file` reads an energy-loss table.

## Example

```python
from li7fit.histogram import load_histogram
from li7fit.params import read_parameters, write_parameters
from li7fit.spectrum import SpectrumFit, efficiency_from_uniform

params = read_parameters("para.dat", npeaks=2)
efficiency = efficiency_from_uniform(load_histogram("uniform.txt"), 200)
fit = SpectrumFit(load_histogram("data.txt"), efficiency, 2, params.values, params.used)
fit.load_peaks("peak1.txt", "peak2.txt")
chisq, best = fit.minimize(params.free_values())
write_parameters("para2.dat", params.with_free_values(best))
fit.write_table("out.dat", fit.params)
```

## What it does not do

- There is no command-line program; fits are run from Python.
- There is no scan over grids of simulation files; to compare many peak shapes,
  call `SpectrumFit.load_peaks` and `SpectrumFit.minimize` for each set yourself.
- Spectra are read only in the package's own text histogram format.