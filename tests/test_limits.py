import pytest

from procparse.errors import InternalError
from procparse.limits import Limit, Limits, parse_limit_value

SAMPLE = """\
Limit                     Soft Limit           Hard Limit           Units     
Max cpu time              unlimited            unlimited            seconds   
Max file size             unlimited            unlimited            bytes     
Max data size             unlimited            unlimited            bytes     
Max stack size            8388608              unlimited            bytes     
Max core file size        0                    unlimited            bytes     
Max resident set          unlimited            unlimited            bytes     
Max processes             63632                63632                processes 
Max open files            1024                 524288               files     
Max locked memory         65536                65536                bytes     
Max address space         unlimited            unlimited            bytes     
Max file locks            unlimited            unlimited            locks     
Max pending signals       63632                63632                signals   
Max msgqueue size         819200               819200               bytes     
Max nice priority         0                    0                    
Max realtime priority     0                    0                    
Max realtime timeout      unlimited            unlimited            us        
"""


def test_parse_limit_value():
    assert parse_limit_value("unlimited") is None
    assert parse_limit_value("4096") == 4096


@pytest.mark.parametrize("text", ["-1", "abc", "", "18446744073709551616", "Unlimited"])
def test_parse_limit_value_invalid(text):
    with pytest.raises(InternalError):
        parse_limit_value(text)


def test_limits_values():
    limits = Limits.from_text(SAMPLE)
    assert limits.max_cpu_time == Limit(None, None)
    assert limits.max_stack_size == Limit(8388608, None)
    assert limits.max_core_file_size == Limit(0, None)
    assert limits.max_processes == Limit(63632, 63632)
    assert limits.max_open_files == Limit(1024, 524288)
    assert limits.max_locked_memory == Limit(65536, 65536)
    assert limits.max_msgqueue_size == Limit(819200, 819200)


def test_unitless_limits():
    limits = Limits.from_text(SAMPLE)
    assert limits.max_nice_priority == Limit(0, 0)
    assert limits.max_realtime_priority == Limit(0, 0)
    assert limits.max_realtime_timeout == Limit(None, None)


def test_unitless_limit_keeps_column_order():
    text = SAMPLE.replace(
        "Max nice priority         0                    0",
        "Max nice priority         5                    7",
    )
    limits = Limits.from_text(text)
    assert limits.max_nice_priority == Limit(5, 7)


def test_missing_limit():
    text = "".join(
        line + "\n" for line in SAMPLE.splitlines() if not line.startswith("Max file locks")
    )
    with pytest.raises(InternalError, match="Max file locks"):
        Limits.from_text(text)


def test_bad_value():
    text = SAMPLE.replace("1024                 524288", "lots                 524288")
    with pytest.raises(InternalError):
        Limits.from_text(text)


def test_short_line_rejected():
    with pytest.raises(InternalError):
        Limits.from_text(SAMPLE + "Max\n")