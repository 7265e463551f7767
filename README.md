# gwugens

Building blocks for sample-by-sample sound synthesis in pure Python, with no
third-party dependencies.

## What is inside

- `gwugens.ugens`: simple unit generators `UGen`, `Gain`, `Impulse`,
  `FullRect`, `HalfRect`, `Step` and `ZeroX`. Each has a `tick(sample)` method
  that takes one input sample and returns one output sample; the latest output
  is kept in `last`.
- `gwugens.lisa`: `LiSa`, a live sampler with several voices (`Voice`),
  looping, bidirectional play, fade-in/fade-out ramps (`ramp_up`,
  `ramp_down`), a record ramp (`set_rec_ramp`), panning across channels
  (`set_pan`), feedback recording and three sync modes (`SyncMode.INTERNAL`,
  `SyncMode.POSITION`, `SyncMode.DURATION`). Bad arguments or voice indices
  raise `InvalidLiSaInit`.
- `gwugens.lsys`: `LSystem`, an L-system over the base-36 symbols `0-9a-z`
  with the grammar `axiom|key:value|key:value`, plus `generate(code, order)`.
  Reading output before `parse` raises `LSystemNotInitiated`.
- `gwugens.kmeans`: k-means clustering (`kmeans`, `kmeans_refine`),
  k-nearest-neighbour classification (`knn_classify`, `knn_classify_multi`),
  `euclidean_distance` (the squared distance) and `sort_by_distance`.
- `gwugens.mathlib`: the seedable random generator `Rng` (`rand`, `rand2`,
  `randf`, `rand2f`, `seed`) and the helpers `abs_int`, `sgn`, `fmin`,
  `fmax`, `remainder` and `power`.
- `gwugens.fileio`: `FileIO`, a line-oriented text file wrapper usable as a
  context manager, raising `FileCtorException`, `FileReadException` and
  `FileWriteException`.
- `gwugens.osc`: OSC message encoding and decoding (`encode_message`,
  `decode_message`, `parse_url`), a sender `OscOut` over UDP, TCP or Unix
  sockets (`Proto`), and a UDP receiver `OscIn`.
- `gwugens.lebiniou`: `LeBiniou`, a stereo pass-through that sends every frame
  as two floats to the OSC path `/lebiniou/audioinput` (by default at
  `localhost:9999`).

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Generate an L-system string:

```python
from gwugens.lsys import generate

print(generate("a|a:ab|b:a", 5))   # abaababa
```

Step through it one symbol per trigger:

```python
from gwugens.lsys import LSystem

system = LSystem()
system.parse(3, "a|a:ab|b:a")
print(system.size())                  # 3
print([system.tick(1) for _ in range(3)])   # [10.0, 11.0, 10.0]
```

Classify a point with nearest neighbours:

```python
from gwugens.kmeans import knn_classify

data = [[1.2, 1.1, 1.3], [3.2, 3.1, 3.3]]
labels = [0, 1]
print(knn_classify(data, labels, 2, [1, 1, 3], 1))
```

Cluster data; the centroids list is filled in place:

```python
from gwugens.kmeans import kmeans

centroids = [[0.0, 0.0], [0.0, 0.0]]
labels = kmeans([[0, 0], [0, 1], [9, 9], [9, 8]], 2, 1e-4, centroids)
```

Record into the live sampler and play it back:

```python
from gwugens.lisa import LiSa

sampler = LiSa(1, 1, 44100)
sampler.record = True
for _ in range(100):
    sampler.tick(0.5)
sampler.record = False
sampler.set_pan(0, 0.0)          # route voice 0 fully to channel 0
sampler.voice(0).play = True
out = sampler.tick(0.0)
```

Voice gains start at zero, so a voice is silent until `set_pan` has been
called for it.

Send an OSC message:

```python
from gwugens.osc import OscOut

with OscOut("localhost", 9000) as out:
    out.add_int(1).add_float(0.5).add_string("hello")
    out.send("/synth/note")
```

Receive one:

```python
from gwugens.osc import OscIn

with OscIn(9000) as receiver:
    receiver.add("/synth/note", "ids")
    if receiver.wait(1.0) and receiver.recv():
        note = receiver.get_int()
        level = receiver.get_float()
        text = receiver.get_string()
```

Read a file line by line:

```python
from gwugens.fileio import FileIO, FileReadException

with FileIO("notes.txt", "r") as f:
    try:
        while True:
            print(f.read())
    except FileReadException:
        pass
```

## What this package does not do

It does not open audio devices, run a processing graph or schedule unit
generators: every `tick` is called by your own code, one sample at a time.
There are no oscillators other than what the unit generators above provide.
`OscIn` listens on UDP only and does not accept OSC bundles.