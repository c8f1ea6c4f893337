# rgbdlog

Building blocks for handling RGB-D capture data in Python:

- `rgbdlog.logreader` reads raw frame logs of depth and colour images, with
  zlib-compressed depth and JPEG-compressed colour frames, and steps through
  them forwards, backwards, fast-forwarding and rewinding;
- `rgbdlog.jpeg` decodes JPEG colour frames;
- `rgbdlog.cameras`, `rgbdlog.openni` and `rgbdlog.live` model live depth
  cameras that write frames into a ring of buffers, and a reader that serves
  the newest frame;
- `rgbdlog.odometry` loads ground-truth camera trajectories and turns them
  into poses;
- `rgbdlog.settings` reads camera calibration files and the command-line
  settings of a reconstruction run;
- `rgbdlog.sync` holds a value shared between threads.

## Reading a raw log

```python
from rgbdlog.logreader import RawLogReader

with RawLogReader("capture.klg", False, 640, 480) as reader:
    print(reader.num_frames())
    while reader.has_more():
        reader.get_next()
        depth, rgb, timestamp = reader.depth, reader.rgb, reader.timestamp
```

A log starts with a little-endian int32 frame count. Each frame is an int64
timestamp, an int32 depth size and an int32 image size, followed by the depth
bytes (raw uint16 values, or zlib-compressed) and the image bytes (raw 3-byte
pixels, JPEG, or none at all, in which case the colour frame is all zeros).

After `get_next()` the reader holds `depth` as a `(height, width)` uint16
array, `rgb` as a `(height, width, 3)` uint8 array, and the frame's
`timestamp`. With `flip_colors` set, the colour channels are reversed.

- `get_back()` reloads the previous frame position; it raises `IndexError`
  when there is none.
- `fast_forward(frame)` skips ahead without decoding until `current_frame`
  reaches `frame` or the log runs out.
- `rewind()` starts again from the first frame; `rewound()` says whether the
  reader is back at the start.
- `has_more()` is true while `current_frame + 1 < num_frames()`.
- `set_auto(value)` only records the value in `auto_settings`, as a recorded
  log has no camera to change.

A truncated or malformed log raises `LogFormatError`. `LogReader` is the
abstract base shared with the live reader.

## JPEG frames

`rgbdlog.jpeg.decode_jpeg(data)` decodes JPEG bytes into a
`(height, width, 3)` uint8 array with the channel order reversed (an RGB
image comes back as BGR). Anything that is not a valid JPEG raises
`JPEGDecodeError`.

## Live cameras

A camera (`rgbdlog.cameras.CameraInterface`) writes frames into
`frame_buffers`, a list of `FrameBuffer` slots each holding `depth`, `rgb`
and `timestamp`. Its `latest_depth_index` counts frames written, starting at
-1; the newest frame is in slot `latest_depth_index % num_buffers`
(`num_buffers` is 10). `ok()` says whether the camera started and `error()`
why not.

`rgbdlog.openni.OpenNI2Interface(width, height, fps, device)` drives a device
object supplied by the caller. The device offers `depth_modes` and
`rgb_modes` (sequences of `VideoMode`), `start(depth_mode, color_mode)`
(raising `OSError` on failure), `add_listeners(depth_callback, rgb_callback)`,
`stop()`, and the auto exposure and auto white balance setters and getters.
If the requested mode is not supported by both streams, construction raises
`ValueError`. Incoming frames are handled by `RGBCallback` and
`DepthCallback`, whose `on_new_frame(data, timestamp)` copy a frame into the
ring; a depth frame is only counted once a colour frame has arrived to pair
it with. `find_mode(...)` checks mode support and `format_modes(...)` lists
current and supported modes as text, using the `PixelFormat` labels.

`rgbdlog.live.LiveLogReader(file, flip_colors, camera, width, height, base_dir)`
takes either a camera object or a `CameraType`, in which case
`create_camera(camera_type, width, height)` opens it.
`wait_for_first_frame(timeout)` blocks until a frame has arrived (raising
`RuntimeError` if the camera did not start, `TimeoutError` on timeout);
`get_next()` copies the newest frame unless it was already served. A live
reader always `has_more()`, reports `num_frames()` as 2147483647, cannot
rewind, step back or skip ahead, and names itself `<base_dir>/live`.
`set_auto(value)` switches the camera's auto exposure and white balance.

## Ground-truth trajectories

```python
from rgbdlog.odometry import GroundTruthOdometry, load_trajectory

odometry = GroundTruthOdometry("trajectory.txt")
pose = odometry.get_transformation(1305031102175304)
covariance = odometry.get_covariance()
```

Each line of a trajectory file holds `utime,x,y,z,qx,qy,qz,qw`;
`load_trajectory(filename)` reads it into a dict from timestamp to 4x4 pose
matrix, raising `ValueError` on malformed lines. The first call to
`get_transformation` returns the identity; later calls return the stored
pose converted out of the iSAM basis. A timestamp with no recorded pose
raises `KeyError`. `get_covariance()` returns a fixed 6x6 diagonal matrix.

## Settings and calibration

```python
from rgbdlog.settings import parse_settings, load_calibration

settings = parse_settings(["-l", "capture.klg", "-c", "8", "-q"])
intrinsics = load_calibration("calibration.txt")
```

`load_calibration` reads `fx fy cx cy` from the first line of a file into an
`Intrinsics`; anything else raises `CalibrationError`. `parse_settings(argv)`
takes the arguments without the program name (or `sys.argv[1:]`) and returns
a `Settings`. Recognised options:

| Option | Setting |
| --- | --- |
| `-cal FILE` | calibration file for `intrinsics` |
| `-l FILE` | `log_file`; without it, `live` is true |
| `-p FILE` | `pose_file` |
| `-c`, `-d`, `-i` | `confidence`, `depth`, `icp` |
| `-ie`, `-cv`, `-pt`, `-ft` | `icp_err_thresh`, `cov_thresh`, `photo_thresh`, `fern_thresh` |
| `-t`, `-ic`, `-s`, `-e` | `time_delta`, `icp_count_thresh`, `start`, `end` |
| `-icl`, `-f`, `-rl`, `-fs`, `-q`, `-fo`, `-r`, `-ftf`, `-sc` | `iclnuim`, `flip_colors`, `reloc`, `frameskip`, `quiet`, `fast_odom`, `rewind`, `frame_to_frame_rgb`, `showcase` |
| `-nso` | turns `so3` off |
| `-o` | `open_loop`, unless a pose file is given |

`Settings.fusion_time_delta()` returns `time_delta`, or 1073741823 in open
loop.

## Synchronised values

`rgbdlog.sync.ThreadMutexObject` wraps a value behind a lock and a
condition: `assign`, `get_value`, `increment`, `assign_and_notify_all`,
`notify_all`, `wait_for_signal(timeout)` (raising `TimeoutError`) and
`get_value_wait(wait_us)`.

## What this package does not do

It reads and prepares frames, poses and settings; it does not perform dense
reconstruction, draw anything on screen, or compress and stream point
clouds. It has no command-line program. It does not talk to camera hardware
itself: `RealSenseInterface` and `ZedInterface` always report that their
capture library is missing, and `OpenNI2Interface` needs a device object
provided by the caller.