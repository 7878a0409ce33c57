"""
Inference entry points for whisperline.

Loaded by whisperline from source into its own module namespace. Optional
arguments arrive as text, with the literal string "None" meaning absent.
"""

from faster_whisper import WhisperModel

ABSENT = "None"


def _optional(value):
    if value == ABSENT:
        return None
    return value


def new_model(model_name, device, compute_type):
    return WhisperModel(model_name, device=device, compute_type=compute_type)


def transcribe_audio(
    model,
    path,
    prompt,
    prefix,
    language,
    beam_size,
    best_of,
    patience,
    length_penalty,
    chunk_length,
    vad,
):
    active, threshold, min_speech, max_speech, min_silence, padding = vad

    vad_parameters = None
    if active:
        vad_parameters = {
            "threshold": threshold,
            "min_speech_duration_ms": min_speech,
            "min_silence_duration_ms": min_silence,
            "speech_pad_ms": padding,
        }
        max_speech = _optional(max_speech)
        if max_speech is not None:
            vad_parameters["max_speech_duration_s"] = float(max_speech)

    chunk_length = _optional(chunk_length)

    segments, _info = model.transcribe(
        path,
        initial_prompt=_optional(prompt),
        prefix=_optional(prefix),
        language=_optional(language),
        beam_size=beam_size,
        best_of=best_of,
        patience=patience,
        length_penalty=length_penalty,
        chunk_length=int(chunk_length) if chunk_length is not None else None,
        vad_filter=active,
        vad_parameters=vad_parameters,
    )

    return [
        (
            segment.id,
            segment.seek,
            segment.start,
            segment.end,
            segment.text,
            segment.temperature,
            segment.avg_logprob,
            segment.compression_ratio,
            segment.no_speech_prob,
        )
        for segment in segments
    ]
