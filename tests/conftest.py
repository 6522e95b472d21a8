"""
Pytest fixtures for the parity tests.

테스트 구성:
- 래퍼 포함 문서, 래퍼 없는 문서, 빈 문서 분리
- XML은 문자열로 직접 작성 (외부 샘플 파일 의존 없음)
"""

from pathlib import Path

import pytest
import yaml

from src.core.config import ParityConfig

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def parity_config() -> ParityConfig:
    """내장 기본값 설정 (default.yaml과 무관)."""
    return ParityConfig()


# =============================================================================
# Source Document Fixtures
# =============================================================================

ATML_NS = (
    'xmlns="urn:IEEE-1636.1:2011:01:TestResultsCollection" '
    'xmlns:tr="urn:IEEE-1636.1:2011:01:TestResults" '
    'xmlns:c="urn:IEEE-1671:2010:Common" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
)

BASIC_RESULTS_XML = f"""<?xml version="1.0" encoding="utf-8"?>
<TestResultsCollection {ATML_NS}>
  <TestResults>
    <tr:ResultSet ID="RS-1" name="C:\\Seqs\\UUT_Test.seq#MainSequence" startDateTime="2024-01-15T09:30:00">
      <tr:Outcome value="Passed"/>
      <tr:TestGroup ID="G-1" callerName="Cold_Start" startDateTime="2024-01-15T09:30:01">
        <tr:Outcome value="Passed"/>
        <tr:Test ID="T-1" callerName="Voltage_Check" startDateTime="2024-01-15T09:30:02">
          <tr:Outcome value="Passed"/>
          <tr:TestResult ID="TR-1">
            <tr:TestData>
              <c:Datum xsi:type="c:double" value="5" nonStandardUnit="V"/>
            </tr:TestData>
            <tr:TestLimits>
              <tr:Limits>
                <c:LimitPair operator="AND">
                  <c:Limit comparator="GE"><c:Datum xsi:type="c:double" value="4.5"/></c:Limit>
                  <c:Limit comparator="LE"><c:Datum xsi:type="c:double" value="5.5"/></c:Limit>
                </c:LimitPair>
              </tr:Limits>
            </tr:TestLimits>
          </tr:TestResult>
        </tr:Test>
        <tr:Test ID="T-2" callerName="Retry" startDateTime="2024-01-15T09:30:03">
          <tr:Outcome value="Passed"/>
        </tr:Test>
        <tr:Test ID="T-3" callerName="Retry" startDateTime="2024-01-15T09:30:04">
          <tr:Outcome value="Failed"/>
        </tr:Test>
      </tr:TestGroup>
      <tr:SessionAction ID="SA-1" name="Cleanup">
        <tr:ActionOutcome value="Done"/>
      </tr:SessionAction>
    </tr:ResultSet>
  </TestResults>
</TestResultsCollection>
"""

BARE_RESULTS_XML = """<?xml version="1.0" encoding="utf-8"?>
<ResultSet ID="RS-1" name="UUT_Test#123">
  <Outcome value="Passed"/>
  <TestGroup ID="G-1" callerName="Cold_Start">
    <Test ID="T-1" callerName="Voltage_Check">
      <TestResult>
        <TestData><Datum value="5.01" unit="V"/></TestData>
      </TestResult>
    </Test>
  </TestGroup>
</ResultSet>
"""


@pytest.fixture
def basic_results_xml() -> str:
    """그룹/측정/스텝/세션 액션이 모두 포함된 ATML 문서."""
    return BASIC_RESULTS_XML


@pytest.fixture
def basic_results_path(tmp_path: Path, basic_results_xml: str) -> Path:
    """BASIC 문서를 파일로 저장."""
    path = tmp_path / "results.xml"
    path.write_text(basic_results_xml, encoding="utf-8")
    return path


@pytest.fixture
def bare_results_xml() -> str:
    """래퍼 없는 ResultSet 문서 (네임스페이스 없음)."""
    return BARE_RESULTS_XML


@pytest.fixture
def empty_result_set_xml() -> str:
    """인식 가능한 문서 요소지만 ResultSet이 없는 문서."""
    return '<TestResultsCollection><TestResults/></TestResultsCollection>'
