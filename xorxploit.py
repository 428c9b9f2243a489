#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
xorxploit.py: ciphertext-only recovery of XOR ("Vernam") encrypted data.

Breaks a single repeating key byte by brute force and a repeating multi-byte
key (shorter than 40 bytes) by Hamming-distance key length estimation plus
column transposition.
"""

import argparse
import base64
import binascii
import itertools
import os
import string
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from colorama import init as _init_colorama, Fore, Style

# ---------- Colors ----------
BOLD = Style.BRIGHT; RESET = Style.RESET_ALL
CYAN, GREEN, YELLOW, BLUE = Fore.CYAN, Fore.GREEN, Fore.YELLOW, Fore.BLUE

def cCYN(s): return f"{BOLD}{CYAN}{s}{RESET}"
def cGRN(s): return f"{BOLD}{GREEN}{s}{RESET}"
def cYEL(s): return f"{BOLD}{YELLOW}{s}{RESET}"
def cBLU(s): return f"{BLUE}{s}{RESET}"

def eprint(*a, **k): print(*a, file=sys.stderr, **k)

# ---------- Settings ----------
# least common first, so a character's score is its index + 1
ENGLISH_FREQ = "QZXJKVBWPYGMCFULDRHS NIOTAE"
_FREQ_RANK = {ch: i + 1 for i, ch in enumerate(ENGLISH_FREQ)}

MIN_KEY_LENGTH = 2
MAX_KEY_LENGTH = 40  # exclusive
SEGMENTS = 4
TOP_LENGTHS = 5

ENCODINGS = ("auto", "hex", "base64", "raw")
DEFAULT_ENCODINGS = {
    "single": "hex",
    "lines": "hex",
    "repeating": "base64",
    "keysize": "base64",
    "encrypt": "hex",
}

# ---------- Errors ----------
class VernamAttackError(Exception):
    """Base class for every failure surfaced by the attacks."""

class UnevenLength(VernamAttackError):
    def __init__(self, message: str = "input lengths are not equal"):
        super().__init__(message)

class NoPlaintextFound(VernamAttackError):
    def __init__(self, message: str = "no key produced valid UTF-8 text"):
        super().__init__(message)

class PlaintextNotAscii(VernamAttackError):
    def __init__(self, candidate: "ScoredCandidate"):
        super().__init__(f"plaintext with highest score (key 0x{candidate.key:02x}) is not ASCII")
        self.candidate = candidate

class InsufficientLength(VernamAttackError):
    def __init__(self, key_length: int, available: int):
        super().__init__(
            f"key length {key_length} needs {SEGMENTS * key_length} bytes of ciphertext, got {available}"
        )
        self.key_length = key_length
        self.available = available

class InvalidEncoding(VernamAttackError):
    def __init__(self, encoding: str, reason: str):
        super().__init__(f"invalid {encoding} input: {reason}")
        self.encoding = encoding

# ---------- Data classes ----------
@dataclass
class ScoredCandidate:
    key: int
    text: str
    score: int

@dataclass
class TieDetected:
    score: int
    candidates: Tuple[ScoredCandidate, ...]

    @property
    def keys(self) -> List[int]:
        return [c.key for c in self.candidates]

    def __str__(self) -> str:
        shown = ", ".join(f"0x{k:02x}" for k in self.keys[:8])
        more = f" (+{len(self.candidates) - 8} more)" if len(self.candidates) > 8 else ""
        return f"{len(self.candidates)} keys share score {self.score}: {shown}{more}"

@dataclass
class SingleByteRecovery:
    key: int
    plaintext: str
    score: int
    tie: Optional[TieDetected] = None

@dataclass
class LineRecovery:
    line_number: int
    key: int
    plaintext: str
    score: int
    tie: Optional[TieDetected] = None

@dataclass
class KeyLengthCandidate:
    length: int
    distance: float

@dataclass
class RepeatingKeyRecovery:
    key: bytes
    plaintext: str
    score: int
    ranking: List[KeyLengthCandidate] = field(default_factory=list)
    ties: Dict[int, TieDetected] = field(default_factory=dict)  # column -> tie

    @property
    def key_length(self) -> int:
        return len(self.key)

TieHandler = Callable[[TieDetected], None]

# ---------- XOR combinator ----------
_END = object()

class XorStream:
    """
    Lazily XOR two byte sources in lockstep.

    Single pass. Raises UnevenLength as soon as one source runs out before the
    other; when both sources have a length the check happens before anything
    is emitted.
    """

    def __init__(self, a: Iterable[int], b: Iterable[int]):
        self._sized = (len(a), len(b)) if hasattr(a, "__len__") and hasattr(b, "__len__") else None
        self._a = iter(a)
        self._b = iter(b)

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        if self._sized is not None:
            la, lb = self._sized
            self._sized = None
            if la != lb:
                raise UnevenLength(f"input lengths differ ({la} != {lb})")
        x = next(self._a, _END)
        y = next(self._b, _END)
        if x is _END and y is _END:
            raise StopIteration
        if x is _END or y is _END:
            raise UnevenLength()
        return x ^ y

def xor_bytes(a: Iterable[int], b: Iterable[int]) -> bytes:
    return bytes(XorStream(a, b))

def repeating_key_xor(data: bytes, key: bytes) -> bytes:
    """Encrypt or decrypt data with key cycled to its length."""
    if not key:
        raise ValueError("key must not be empty")
    return xor_bytes(data, itertools.islice(itertools.cycle(key), len(data)))

def hamming_distance(a: bytes, b: bytes) -> int:
    """Number of differing bits: the population count of a XOR b."""
    return sum(bin(x).count("1") for x in XorStream(a, b))

# ---------- Scoring ----------
def score(text: str, case_sensitive: bool = True) -> int:
    """
    Plausibility of text as English: sum of (rank + 1) over every character
    found in ENGLISH_FREQ. The table is uppercase, so with case_sensitive
    lowercase letters count for nothing.
    """
    if case_sensitive:
        return sum(_FREQ_RANK.get(ch, 0) for ch in text)
    return sum(_FREQ_RANK.get(ch.upper(), 0) for ch in text)

# ---------- Monoalphabetic (single-byte key) ----------
def single_byte_candidates(ciphertext: bytes, case_sensitive: bool = False) -> List[ScoredCandidate]:
    """Every key byte whose output decodes as UTF-8, scored, in key order."""
    outs: List[ScoredCandidate] = []
    for k in range(256):
        plain = xor_bytes(ciphertext, itertools.repeat(k, len(ciphertext)))
        try:
            text = plain.decode("utf-8")
        except UnicodeDecodeError:
            continue
        outs.append(ScoredCandidate(k, text, score(text, case_sensitive)))
    return outs

def recover_single_byte(ciphertext: bytes, case_sensitive: bool = False,
                        on_tie: Optional[TieHandler] = None) -> SingleByteRecovery:
    """
    Brute force all 256 single-byte keys and keep the most English-looking
    result. Equal top scores are reported as a TieDetected (through on_tie and
    on the result) and settled in favour of the lowest key byte.
    """
    outs = single_byte_candidates(bytes(ciphertext), case_sensitive)
    if not outs:
        raise NoPlaintextFound()

    best_score = max(c.score for c in outs)
    top = [c for c in outs if c.score == best_score]
    tie = None
    if len(top) > 1:
        tie = TieDetected(best_score, tuple(top))
        if on_tie is not None:
            on_tie(tie)

    best = top[0]
    if not best.text.isascii():
        raise PlaintextNotAscii(best)
    return SingleByteRecovery(best.key, best.text, best.score, tie)

def recover_best_line(lines: Iterable[Union[str, bytes]], encoding: str = "hex", case_sensitive: bool = False,
                      on_tie: Optional[TieHandler] = None,
                      on_skip: Optional[Callable[[int, VernamAttackError], None]] = None) -> Optional[LineRecovery]:
    """
    Run the single-byte attack on each line independently and return the
    highest scoring success, or None when no line could be recovered.
    """
    best: Optional[LineRecovery] = None
    for number, line in enumerate(lines, 1):
        try:
            if isinstance(line, str):
                if not line.strip():
                    continue
                ciphertext = decode_ciphertext(line, encoding)
            else:
                ciphertext = bytes(line)
            res = recover_single_byte(ciphertext, case_sensitive, on_tie)
        except (InvalidEncoding, NoPlaintextFound, PlaintextNotAscii) as e:
            if on_skip is not None:
                on_skip(number, e)
            continue
        if best is None or res.score > best.score:
            best = LineRecovery(number, res.key, res.plaintext, res.score, res.tie)
    return best

# ---------- Key length estimation ----------
def normalized_distance(ciphertext: bytes, key_length: int) -> float:
    """
    Sum of the Hamming distances between every pair of the first SEGMENTS
    key_length-sized blocks, divided by key_length.
    """
    if key_length < 1:
        raise ValueError("key length must be positive")
    if len(ciphertext) < SEGMENTS * key_length:
        raise InsufficientLength(key_length, len(ciphertext))
    blocks = [ciphertext[i * key_length:(i + 1) * key_length] for i in range(SEGMENTS)]
    total = sum(hamming_distance(a, b) for a, b in itertools.combinations(blocks, 2))
    return total / key_length

def rank_key_lengths(ciphertext: bytes, min_length: int = MIN_KEY_LENGTH,
                     max_length: int = MAX_KEY_LENGTH) -> List[KeyLengthCandidate]:
    """Candidate key lengths, most likely first (smallest normalized distance)."""
    ciphertext = bytes(ciphertext)
    ranking: List[KeyLengthCandidate] = []
    for length in range(min_length, max_length):
        try:
            ranking.append(KeyLengthCandidate(length, normalized_distance(ciphertext, length)))
        except InsufficientLength:
            continue
    ranking.sort(key=lambda c: (c.distance, c.length))
    return ranking

# ---------- Column transposition ----------
def transpose(ciphertext: bytes, key_length: int) -> List[bytes]:
    """Column i holds every byte encrypted with key byte i."""
    if key_length < 1:
        raise ValueError("key length must be positive")
    ciphertext = bytes(ciphertext)
    return [ciphertext[i::key_length] for i in range(key_length)]

def interleave(columns: Sequence[bytes]) -> bytes:
    out = bytearray()
    for row in itertools.zip_longest(*columns):
        out.extend(b for b in row if b is not None)
    return bytes(out)

# ---------- Polyalphabetic (repeating key) ----------
def recover_with_key_length(ciphertext: bytes, key_length: int, case_sensitive: bool = False,
                            on_tie: Optional[TieHandler] = None) -> RepeatingKeyRecovery:
    """
    Solve each column as its own single-byte problem. The first column that
    fails aborts the whole recovery.
    """
    key = bytearray()
    ties: Dict[int, TieDetected] = {}
    for i, column in enumerate(transpose(ciphertext, key_length)):
        res = recover_single_byte(column, case_sensitive, on_tie)
        if res.tie is not None:
            ties[i] = res.tie
        key.append(res.key)

    plain = repeating_key_xor(ciphertext, bytes(key))
    try:
        text = plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise NoPlaintextFound(f"key {bytes(key)!r} does not decrypt to UTF-8 text") from e
    return RepeatingKeyRecovery(bytes(key), text, score(text, case_sensitive), ties=ties)

def recover_repeating_key(ciphertext: bytes, key_length: Optional[int] = None, candidates: int = 1,
                          case_sensitive: bool = False,
                          on_tie: Optional[TieHandler] = None) -> RepeatingKeyRecovery:
    """
    Estimate the key length, transpose, break every column and decrypt.

    key_length skips the estimate. candidates > 1 tries that many of the best
    ranked lengths and keeps the highest scoring plaintext; lengths that fail
    are skipped and the last error is raised if none succeed. Only the ties
    of the returned recovery reach on_tie.
    """
    ciphertext = bytes(ciphertext)
    ranking: List[KeyLengthCandidate] = []
    if key_length is not None:
        lengths = [key_length]
    else:
        ranking = rank_key_lengths(ciphertext)
        if not ranking:
            raise InsufficientLength(MIN_KEY_LENGTH, len(ciphertext))
        lengths = [c.length for c in ranking[:max(1, candidates)]]

    best: Optional[RepeatingKeyRecovery] = None
    error: Optional[VernamAttackError] = None
    for length in lengths:
        try:
            res = recover_with_key_length(ciphertext, length, case_sensitive)
        except VernamAttackError as e:
            if len(lengths) == 1:
                raise
            error = e
            continue
        if best is None or res.score > best.score or (res.score == best.score and length < best.key_length):
            best = res
    if best is None:
        raise error
    best.ranking = ranking
    if on_tie is not None:
        for tie in best.ties.values():
            on_tie(tie)
    return best

# ---------- Encoding detection & codecs ----------
_HEX_CHARS = set(string.hexdigits)
_BASE64_CHARS = set(string.ascii_letters + string.digits + "+/=")

def _as_text(data: Union[str, bytes]) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="ignore")
    return data

def detect_hex_pattern(data: Union[str, bytes]) -> float:
    """Confidence 0.0-1.0 that data is hexadecimal text."""
    s = "".join(_as_text(data).splitlines()).strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if len(s) < 2 or not all(c in _HEX_CHARS for c in s):
        return 0.0
    length_score = 0.9 if len(s) % 2 == 0 else 0.6
    # longer runs are more convincing
    return min(len(s) / 20.0, 1.0) * length_score

def detect_base64_pattern(data: Union[str, bytes]) -> float:
    """Confidence 0.0-1.0 that data is base64 text."""
    s = "".join(_as_text(data).splitlines()).strip()
    if not s or not all(c in _BASE64_CHARS for c in s):
        return 0.0
    padding = len(s) - len(s.rstrip("="))
    if padding > 2 or "=" in s.rstrip("="):
        return 0.0
    length_score = 0.8 if len(s) % 4 == 0 else 0.3
    diversity_score = min(len(set(s.rstrip("="))) / 10.0, 1.0)
    return (length_score + diversity_score) / 2.0

def guess_encoding(data: Union[str, bytes]) -> str:
    if detect_hex_pattern(data) > 0.5:
        return "hex"
    if detect_base64_pattern(data) > 0.5:
        return "base64"
    return "raw"

def decode_ciphertext(data: Union[str, bytes], encoding: str = "auto") -> bytes:
    """Turn hex / base64 / raw text into ciphertext bytes."""
    if encoding == "auto":
        encoding = guess_encoding(data)
    if encoding == "raw":
        return data if isinstance(data, bytes) else data.encode("utf-8")
    if encoding not in ("hex", "base64"):
        raise ValueError(f"unknown encoding {encoding!r}")

    try:
        s = "".join((data.decode("ascii") if isinstance(data, bytes) else data).split())
        if encoding == "hex":
            return binascii.unhexlify(s)
        return base64.b64decode(s, validate=True)
    except ValueError as e:  # binascii.Error, UnicodeDecodeError, non-ASCII str
        raise InvalidEncoding(encoding, str(e)) from e

def encode_ciphertext(data: bytes, encoding: str = "hex") -> str:
    if encoding == "hex":
        return data.hex()
    if encoding == "base64":
        return base64.b64encode(data).decode("ascii")
    raise ValueError(f"cannot print ciphertext as {encoding!r}")

# ---------- Helpers ----------
def is_file(p: str) -> bool:
    return os.path.isfile(p)

def read_value_or_file(v: Optional[str]) -> Optional[bytes]:
    if v is None: return None
    if is_file(v):
        with open(v, "rb") as f:
            return f.read()
    return v.encode()

def format_key(key: Union[int, bytes]) -> str:
    if isinstance(key, int):
        ch = chr(key)
        return f"0x{key:02x} ({ch!r})" if ch.isprintable() else f"0x{key:02x}"
    return f"{key!r} (hex {key.hex()})"

# ---------- Report ----------
def write_report_file(path: str, results: Sequence[Tuple[str, str]],
                      ranking: Sequence[KeyLengthCandidate] = (), ties: Sequence[str] = ()) -> bool:
    """Plain-text copy of a run: results first, then the estimator and tie details."""
    try:
        _write_report(path, results, ranking, ties)
    except OSError as e:
        eprint(cYEL(f"Failed to write report: {e}"))
        return False
    return True

def _write_report(path, results, ranking, ties):
    with open(path, "w", encoding="utf-8") as f:
        f.write("============================================\n")
        f.write("               Recovered\n")
        f.write("============================================\n\n")
        for label, value in results:
            f.write(f"[{label}] {value}\n")
        if ranking:
            f.write("\n============================================\n")
            f.write("          Key length ranking\n")
            f.write("============================================\n\n")
            for c in ranking:
                f.write(f"[{c.length}] {c.distance:.4f}\n")
        if ties:
            f.write("\n============================================\n")
            f.write("               Ties\n")
            f.write("============================================\n\n")
            for t in ties:
                f.write(f"{t}\n")

# ---------- Display ----------
def print_recovery(key: Union[int, bytes], plaintext: str, extra: Sequence[Tuple[str, str]] = ()):
    print("\n==============")
    print(f"Key Found : {cGRN(format_key(key))}")
    for label, value in extra:
        print(f"{label} : {value}")
    print(f"Plaintext : {cGRN(plaintext)}")
    print("==============\n")

def print_ranking(ranking: Sequence[KeyLengthCandidate]):
    for pos, c in enumerate(ranking, 1):
        print(f"{pos:>2}. length {c.length:<2}  distance {c.distance:.3f}")

# ---------- Mode runners ----------
# exit code, report lines, key length ranking
RunOutcome = Tuple[int, List[Tuple[str, str]], List[KeyLengthCandidate]]

def run_single(ciphertext: bytes, args, on_tie: TieHandler) -> RunOutcome:
    res = recover_single_byte(ciphertext, args.case_sensitive, on_tie)
    print_recovery(res.key, res.plaintext, [("Score", str(res.score))])
    return 0, [("key", format_key(res.key)), ("plaintext", res.plaintext)], []

def run_lines(raw: bytes, args, on_tie: TieHandler) -> RunOutcome:
    def on_skip(number: int, err: VernamAttackError):
        if args.debug:
            eprint(cBLU(f"[line {number}] skipped: {err}"))

    lines = raw.decode("utf-8", errors="replace").splitlines()
    best = recover_best_line(lines, args.encoding, args.case_sensitive, on_tie, on_skip)
    if best is None:
        print(cYEL(f"No line out of {len(lines)} produced a plaintext."))
        return 1, [("result", "none")], []
    print_recovery(best.key, best.plaintext, [("Line", str(best.line_number)), ("Score", str(best.score))])
    return 0, [("line", str(best.line_number)), ("key", format_key(best.key)), ("plaintext", best.plaintext)], []

def run_repeating(ciphertext: bytes, args, on_tie: TieHandler) -> RunOutcome:
    res = recover_repeating_key(ciphertext, args.key_length, args.candidates, args.case_sensitive, on_tie)
    if args.debug and res.ranking:
        eprint(cCYN("Key length ranking:"))
        for c in res.ranking:
            eprint(cBLU(f"  [{c.length}] {c.distance:.3f}"))
    print_recovery(res.key, res.plaintext, [("Key length", str(res.key_length)), ("Score", str(res.score))])
    return 0, [("key", format_key(res.key)), ("plaintext", res.plaintext)], res.ranking

def run_keysize(ciphertext: bytes, args) -> RunOutcome:
    ranking = rank_key_lengths(ciphertext)
    if not ranking:
        print(cYEL(f"Ciphertext too short ({len(ciphertext)} bytes) to rank any key length."))
        return 1, [], []
    print(cCYN("Most likely key lengths:"))
    print_ranking(ranking if args.debug else ranking[:TOP_LENGTHS])
    return 0, [("best length", str(ranking[0].length))], ranking

def run_encrypt(plaintext: bytes, key: Optional[bytes], args) -> int:
    if not key:
        print(cYEL("encrypt needs a key (-k).")); return 2
    out = repeating_key_xor(plaintext, key)
    if args.encoding == "raw":
        sys.stdout.buffer.write(out); sys.stdout.flush()
    else:
        print(encode_ciphertext(out, args.encoding))
    return 0

# ---------- Main ----------
def main():
    ap = argparse.ArgumentParser(
        description="xorxploit: break single-byte and repeating-key XOR ciphertext",
        add_help=False
    )
    ap.add_argument("mode", choices=sorted(DEFAULT_ENCODINGS), help="Attack to run")
    ap.add_argument("-c","--ciphertext", help="Ciphertext (raw string or path to file); plaintext for encrypt")
    ap.add_argument("-e","--encoding", choices=ENCODINGS, help="How the ciphertext is written (default depends on mode)")
    ap.add_argument("-k","--key", help="Key for encrypt (raw string or path to file)")
    ap.add_argument("-l","--key-length", type=int, help="Skip estimation and use this key length (repeating)")
    ap.add_argument("-n","--candidates", type=int, default=1, help="Try the N best ranked key lengths (repeating)")
    ap.add_argument("-s","--case-sensitive", action="store_true", help="Score with the uppercase-only frequency table")
    ap.add_argument("-o","--report", help="Write a plain-text report to this path")
    ap.add_argument("-d","--debug", action="store_true", help="Show estimator details and skipped lines")
    ap.add_argument("-h","--help", action="help", help="Show this help and exit")
    args = ap.parse_args()

    _init_colorama(autoreset=True)
    if args.encoding is None:
        args.encoding = DEFAULT_ENCODINGS[args.mode]

    value = args.ciphertext
    if value is None:
        value = input("Ciphertext (text or path to file): ").strip()
    raw = read_value_or_file(value) if value else None
    if not raw and args.mode not in ("single", "encrypt"):
        print(cYEL("Could not read ciphertext.")); sys.exit(2)
    raw = raw or b""

    if args.mode == "encrypt":
        sys.exit(run_encrypt(raw, read_value_or_file(args.key), args))

    ties: List[str] = []
    def on_tie(tie: TieDetected):
        ties.append(str(tie))
        eprint(cYEL(f"Tie detected: {tie}; keeping 0x{tie.candidates[0].key:02x}"))

    try:
        if args.mode == "lines":
            code, results, ranking = run_lines(raw, args, on_tie)
        else:
            ciphertext = decode_ciphertext(raw, args.encoding)
            if args.mode == "single":
                code, results, ranking = run_single(ciphertext, args, on_tie)
            elif args.mode == "repeating":
                code, results, ranking = run_repeating(ciphertext, args, on_tie)
            else:
                code, results, ranking = run_keysize(ciphertext, args)
    except VernamAttackError as e:
        print(cYEL(f"Attack failed: {e}"))
        code, results, ranking = 1, [("error", str(e))], []
    except ValueError as e:
        print(cYEL(str(e)))
        code, results, ranking = 2, [("error", str(e))], []

    if args.report:
        if write_report_file(args.report, results, ranking, ties):
            print(cBLU(f"Report written to {args.report}"))
    sys.exit(code)

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted."); sys.exit(130)
