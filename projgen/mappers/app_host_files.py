"""Generated sources and launch screen for shared test app hosts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from projgen.graph.models import (
    FileDescriptor,
    FileElement,
    Project,
    SideEffectDescriptor,
    SideTable,
    SourceFile,
    TargetFlags,
)
from projgen.mappers.base import MapResult, ProjectMapping

logger = logging.getLogger("projgen.mappers.app_host_files")

APP_DELEGATE_SOURCE = """\
import Foundation
import UIKit

final class AppDelegate: UIResponder, UIApplicationDelegate {

    var window: UIWindow?

    func application(
        _ application: UIApplication,
        didFinishLaunchingWithOptions launchOptions: [UIApplication.LaunchOptionsKey: Any]?
    ) -> Bool {
        window = UIWindow(frame: UIScreen.main.bounds)
        window?.rootViewController = UIViewController()
        window?.makeKeyAndVisible()

        return true
    }
}

_ = UIApplicationMain(CommandLine.argc, CommandLine.unsafeArgv, nil, NSStringFromClass(AppDelegate.self))
"""

LAUNCH_SCREEN_STORYBOARD = """\
<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<document type="com.apple.InterfaceBuilder3.CocoaTouch.Storyboard.XIB" version="3.0" launchScreen="YES" useAutolayout="YES" useTraitCollections="YES" useSafeAreas="YES" colorMatched="YES" initialViewController="01J-lp-oVM">
  <scenes>
    <scene sceneID="EHf-IW-A2E">
      <objects>
        <viewController id="01J-lp-oVM" sceneMemberID="viewController">
          <view key="view" contentMode="scaleToFill" id="Ze5-6b-2t3">
            <rect key="frame" x="0.0" y="0.0" width="375" height="667"/>
            <color key="backgroundColor" red="1" green="1" blue="1" alpha="1" colorSpace="custom" customColorSpace="sRGB"/>
            <viewLayoutGuide key="safeArea" id="6Tk-OE-BBY"/>
          </view>
        </viewController>
        <placeholder placeholderIdentifier="IBFirstResponder" id="iYj-Kq-Ea1" userLabel="First Responder" sceneMemberID="firstResponder"/>
      </objects>
    </scene>
  </scenes>
</document>
"""


class GenerateSharedTestTargetAppHostFilesProjectMapper(ProjectMapping):
    """Points app-host targets at generated ``main.swift`` and storyboard files."""

    def __init__(
        self,
        derived_directory_name: str = "Derived",
        sources_directory_name: str = "Sources",
    ) -> None:
        self.derived_directory_name = derived_directory_name
        self.sources_directory_name = sources_directory_name

    def map(self, value: Project, side_table: SideTable) -> MapResult[Project]:
        side_effects: List[SideEffectDescriptor] = []

        for target in value.targets:
            if not side_table.has_flag(
                TargetFlags.SHARED_TEST_TARGET_APP_HOST, value.path, target.name
            ):
                continue

            derived: Path = value.path / self.derived_directory_name / target.name
            main_path = derived / self.sources_directory_name / "main.swift"
            storyboard_path = derived / "LaunchScreen.storyboard"

            target.sources = [SourceFile(main_path)]
            target.resources = [FileElement.file(storyboard_path)]
            side_effects.append(
                FileDescriptor(main_path, APP_DELEGATE_SOURCE.encode("utf-8"))
            )
            side_effects.append(
                FileDescriptor(storyboard_path, LAUNCH_SCREEN_STORYBOARD.encode("utf-8"))
            )
            logger.debug("Generated app host files for %s under %s", target.name, derived)

        return MapResult(value, side_table, side_effects)
