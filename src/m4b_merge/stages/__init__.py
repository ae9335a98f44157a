"""Pipeline stages, run strictly in order by the PipelineRunner.

Pipeline order: transcode -> probe -> (chapter metadata) -> merge

Stages:
    transcode -- Re-encode every input (mp3/ogg/wav/flac/m4a) into one fixed
                 AAC profile, audio only, one intermediate per input named by
                 its zero-padded position (0000.m4a, 0001.m4a, ...) so lexical
                 order matches input order. Rejects unsupported formats before
                 any ffmpeg call. Fail-fast, no retries.
    probe     -- ffprobe the duration of every intermediate, in order.
    merge     -- Write files.txt (concat demuxer list with escaped quotes) and
                 run one ffmpeg stream-copy pass that concatenates the
                 intermediates and injects chapters.ffmeta as metadata.

The chapter metadata itself is a pure computation (see ``m4b_merge.chapters``);
the runner renders it into the work area between probe and merge.
"""
